"""Qt front end for CardCanvas."""

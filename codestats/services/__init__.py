"""Background services of the code stats extension."""

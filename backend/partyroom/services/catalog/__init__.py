"""Read-mostly prompt catalog: games and the prompts offered for voting."""

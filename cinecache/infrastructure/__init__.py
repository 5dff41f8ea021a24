"""Infrastructure: stockage local des films."""

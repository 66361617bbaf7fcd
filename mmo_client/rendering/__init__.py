"""Camera, renderers, sprite cache and frame scheduling."""

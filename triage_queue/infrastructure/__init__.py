"""Infrastructure components: configuration, settings and logging."""

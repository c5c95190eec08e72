"""Infrastructure: store engine, message transport, bootstrap sources."""

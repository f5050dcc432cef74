"""HTTP surface: application factory and error responder."""

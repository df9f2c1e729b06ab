"""Client entry points: CLI and Flask application."""

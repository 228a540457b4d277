"""Core of the generator: models, configuration, generation and use cases."""

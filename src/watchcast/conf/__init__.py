"""Default configuration profiles loaded by Hydra."""

"""Application layer: settings, controller and HTTP surface."""

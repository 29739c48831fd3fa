"""leaktask - provision, scope and run the gitleaks secret scanner in CI."""

__version__ = "0.3.0"

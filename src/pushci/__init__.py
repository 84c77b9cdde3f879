"""pushci - push-triggered build and test pipeline with GitHub commit statuses."""

__version__ = "0.1.0"

"""jobguard - abuse prevention and upload safety for the job board."""

__version__ = "0.1.0"

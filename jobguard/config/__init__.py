from jobguard.config.loader import load_config, save_config
from jobguard.config.schema import JobGuardConfig

__all__ = ["JobGuardConfig", "load_config", "save_config"]

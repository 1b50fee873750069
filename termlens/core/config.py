"""
TermLens Central Configuration
Contains detection, debounce, hover and styling parameters for the editing engine
"""

from dataclasses import dataclass
from typing import Optional
import os


@dataclass
class DetectionConfig:
    """Configuration for term detection"""

    # Heuristic candidates: words longer than min_word_length, top_k by frequency
    top_k: int = 5
    min_word_length: int = 3

    # Per-term compiled pattern cache
    pattern_cache_size: int = 512


@dataclass
class SchedulerConfig:
    """Configuration for the rescan debounce"""

    debounce_ms: int = 1000


@dataclass
class HoverConfig:
    """Configuration for the definition popup"""

    # Popup is anchored next to the pointer
    offset_x: int = 15
    offset_y: int = -10

    default_description: str = "A technical term in computing and software development"


@dataclass
class StyleConfig:
    """Visual treatment of annotation spans"""

    dark_mode: bool = False

    catalog_light: str = "#eef2ff"
    catalog_dark: str = "#3b4252"
    heuristic_light: str = "#f3f4f6"
    heuristic_dark: str = "#2d3748"
    underline_color: str = "#6366f1"

    def background_for(self, classification: str) -> str:
        if classification == "catalog":
            return self.catalog_dark if self.dark_mode else self.catalog_light
        return self.heuristic_dark if self.dark_mode else self.heuristic_light


@dataclass
class TermLensConfig:
    """Main configuration class combining all settings"""

    detection: DetectionConfig
    scheduler: SchedulerConfig
    hover: HoverConfig
    style: StyleConfig

    # Optional user glossary (YAML or JSON) merged over the embedded one
    glossary_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    def __init__(self,
                 detection: Optional[DetectionConfig] = None,
                 scheduler: Optional[SchedulerConfig] = None,
                 hover: Optional[HoverConfig] = None,
                 style: Optional[StyleConfig] = None):
        """Initialize with optional custom configurations"""
        self.detection = detection or DetectionConfig()
        self.scheduler = scheduler or SchedulerConfig()
        self.hover = hover or HoverConfig()
        self.style = style or StyleConfig()
        self.glossary_path = None
        self.log_level = "INFO"

        # Override with environment variables if present
        self._load_env_overrides()

    def _load_env_overrides(self):
        """Load configuration overrides from environment variables"""
        if os.getenv("TERMLENS_DEBOUNCE_MS"):
            self.scheduler.debounce_ms = int(os.getenv("TERMLENS_DEBOUNCE_MS"))

        if os.getenv("TERMLENS_TOP_K"):
            self.detection.top_k = int(os.getenv("TERMLENS_TOP_K"))

        if os.getenv("TERMLENS_GLOSSARY"):
            self.glossary_path = os.getenv("TERMLENS_GLOSSARY")

        if os.getenv("TERMLENS_DARK_MODE", "").lower() in ("true", "1", "yes"):
            self.style.dark_mode = True

        # Debug override
        if os.getenv("TERMLENS_DEBUG", "").lower() in ("true", "1", "yes"):
            self.log_level = "DEBUG"

    @property
    def debounce_seconds(self) -> float:
        return self.scheduler.debounce_ms / 1000.0

    @classmethod
    def load_from_file(cls, config_path: str) -> 'TermLensConfig':
        """Load configuration from YAML file"""
        import yaml

        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}

            detection = DetectionConfig(**config_data.get('detection', {}))
            scheduler = SchedulerConfig(**config_data.get('scheduler', {}))
            hover = HoverConfig(**config_data.get('hover', {}))
            style = StyleConfig(**config_data.get('style', {}))

            config = cls(detection=detection, scheduler=scheduler, hover=hover, style=style)

            # Override other settings
            for key, value in config_data.items():
                if key not in ['detection', 'scheduler', 'hover', 'style'] and hasattr(config, key):
                    setattr(config, key, value)

            return config

        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")

    def save_to_file(self, config_path: str):
        """Save configuration to YAML file"""
        import yaml

        config_data = {
            'detection': {
                'top_k': self.detection.top_k,
                'min_word_length': self.detection.min_word_length,
                'pattern_cache_size': self.detection.pattern_cache_size
            },
            'scheduler': {
                'debounce_ms': self.scheduler.debounce_ms
            },
            'hover': {
                'offset_x': self.hover.offset_x,
                'offset_y': self.hover.offset_y,
                'default_description': self.hover.default_description
            },
            'style': {
                'dark_mode': self.style.dark_mode,
                'catalog_light': self.style.catalog_light,
                'catalog_dark': self.style.catalog_dark,
                'heuristic_light': self.style.heuristic_light,
                'heuristic_dark': self.style.heuristic_dark,
                'underline_color': self.style.underline_color
            },
            'glossary_path': self.glossary_path,
            'log_level': self.log_level
        }

        with open(config_path, 'w') as f:
            yaml.dump(config_data, f, default_flow_style=False, indent=2)


# Default global configuration instance
default_config = TermLensConfig()

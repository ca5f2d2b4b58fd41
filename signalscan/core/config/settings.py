"""配置管理模块 - 处理signalscan的配置"""

import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from loguru import logger

from signalscan.core.exceptions import ConfigurationError


@dataclass
class ProviderConfig:
    """行情源配置"""

    base_url: str = "https://query1.finance.yahoo.com"
    timeout: float = 10.0
    keepalive_expiry: float = 30.0
    max_connections: int = 10
    max_attempts: int = 3
    backoff_base: float = 0.5
    chart_range: str = "6mo"
    interval: str = "1d"

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigurationError("base_url cannot be empty", "base_url")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive", "timeout")
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1", "max_attempts")
        if self.backoff_base < 0:
            raise ConfigurationError("backoff_base must be non-negative", "backoff_base")


@dataclass
class BatchConfig:
    """批处理调度配置"""

    fetch_concurrency: int = 2
    analyze_concurrency: int = 4
    jitter_min: float = 0.010
    jitter_max: float = 0.050
    retry_rounds: int = 1
    round_delay: float = 5.0

    def __post_init__(self) -> None:
        if self.fetch_concurrency < 1 or self.analyze_concurrency < 1:
            raise ConfigurationError("concurrency caps must be at least 1", "concurrency")
        if self.jitter_min < 0 or self.jitter_min > self.jitter_max:
            raise ConfigurationError("jitter range must satisfy 0 <= min <= max", "jitter")
        if self.retry_rounds < 1:
            raise ConfigurationError("retry_rounds must be at least 1", "retry_rounds")
        if self.round_delay < 0:
            raise ConfigurationError("round_delay must be non-negative", "round_delay")


@dataclass
class SignalConfig:
    """技术指标与三重信号配置

    默认值取自最新版本: 超卖阈值35, 布林带倍数1.0.
    """

    rsi_period: int = 14
    mfi_period: int = 14
    bb_period: int = 20
    bb_multiplier: float = 1.0
    rsi_threshold: float = 35.0
    mfi_threshold: float = 35.0
    min_history: int = 20

    def __post_init__(self) -> None:
        for name in ("rsi_period", "mfi_period", "bb_period", "min_history"):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"{name} must be at least 1", name)
        if self.bb_multiplier < 0:
            raise ConfigurationError("bb_multiplier must be non-negative", "bb_multiplier")


@dataclass
class LoggingConfig:
    """日志配置"""

    level: str = "INFO"
    file: str | None = None
    serialize: bool = True


@dataclass
class SignalScanConfig:
    """signalscan主配置"""

    providers: ProviderConfig = field(default_factory=ProviderConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    signals: SignalConfig = field(default_factory=SignalConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "SignalScanConfig":
        """从字典创建配置"""
        return cls(
            providers=_build_section(ProviderConfig, "providers", config_dict),
            batch=_build_section(BatchConfig, "batch", config_dict),
            signals=_build_section(SignalConfig, "signals", config_dict),
            logging=_build_section(LoggingConfig, "logging", config_dict),
        )

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "providers": asdict(self.providers),
            "batch": asdict(self.batch),
            "signals": asdict(self.signals),
            "logging": asdict(self.logging),
        }


def _build_section(section_cls: type, section: str, config_dict: dict[str, Any]) -> Any:
    """构建单个配置段, 区分未知键与类型错误"""
    values = config_dict.get(section, {})
    if not isinstance(values, dict):
        raise ConfigurationError(f"Configuration section [{section}] must be a table", section)
    unknown = sorted(set(values) - {f.name for f in fields(section_cls)})
    if unknown:
        raise ConfigurationError(f"Unknown configuration key in [{section}]: {', '.join(unknown)}", section)
    try:
        return section_cls(**values)
    except TypeError as e:
        raise ConfigurationError(f"Invalid value type in [{section}]: {e}", section) from e


def _deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
    """深度更新字典"""
    for k, v in u.items():
        if isinstance(v, dict):
            d[k] = _deep_update(d.get(k, {}), v)
        else:
            d[k] = v
    return d


class ConfigManager:
    """配置管理器"""

    def __init__(self, config_path: Path | None = None, use_env: bool = True):
        """初始化配置管理器

        Args:
            config_path: 配置文件路径，如果为None则使用默认路径
            use_env: 是否叠加环境变量
        """
        self.config_path = config_path or Path.home() / ".signalscan" / "config.toml"
        self.use_env = use_env
        self.config = self._load_config()

    def _load_config(self) -> SignalScanConfig:
        """加载配置"""
        config_dict: dict[str, Any] = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "rb") as f:
                    config_dict = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning("Failed to load config from {}: {}", self.config_path, e)
                config_dict = {}

        if self.use_env:
            _deep_update(config_dict, load_config_from_env())

        return SignalScanConfig.from_dict(config_dict)

    def get_config(self) -> SignalScanConfig:
        """获取当前配置"""
        return self.config

    def update_config(self, **updates: Any) -> None:
        """更新配置"""
        config_dict = _deep_update(self.config.to_dict(), updates)
        self.config = SignalScanConfig.from_dict(config_dict)


def get_default_config() -> SignalScanConfig:
    """获取默认配置"""
    return SignalScanConfig()


_ENV_FIELDS: dict[str, tuple[str, str, type]] = {
    "SIGNALSCAN_PROVIDER_BASE_URL": ("providers", "base_url", str),
    "SIGNALSCAN_PROVIDER_TIMEOUT": ("providers", "timeout", float),
    "SIGNALSCAN_PROVIDER_MAX_ATTEMPTS": ("providers", "max_attempts", int),
    "SIGNALSCAN_FETCH_CONCURRENCY": ("batch", "fetch_concurrency", int),
    "SIGNALSCAN_ANALYZE_CONCURRENCY": ("batch", "analyze_concurrency", int),
    "SIGNALSCAN_RSI_THRESHOLD": ("signals", "rsi_threshold", float),
    "SIGNALSCAN_MFI_THRESHOLD": ("signals", "mfi_threshold", float),
    "SIGNALSCAN_BB_MULTIPLIER": ("signals", "bb_multiplier", float),
    "SIGNALSCAN_LOGGING_LEVEL": ("logging", "level", str),
    "SIGNALSCAN_LOGGING_FILE": ("logging", "file", str),
}


def load_config_from_env() -> dict[str, Any]:
    """从环境变量加载配置"""
    config: dict[str, Any] = {}

    for env_name, (section, key, cast) in _ENV_FIELDS.items():
        raw = os.getenv(env_name)
        if raw is None:
            continue
        try:
            value = cast(raw)
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {env_name}: {raw!r}", key) from e
        config.setdefault(section, {})[key] = value

    return config

# config.py
# =============================================================================
# 向导配置加载与合并模块 / Wizard config loading & merging module
#
# 职责 / Responsibilities:
#   - 定义向导运行参数的数据结构（WizardSettings / AdvisorSettings）
#     / Define data structures for wizard runtime params
#   - 实现三层优先级配置加载：代码传入 > 配置文件 > 内置默认值
#     / Three-tier priority loading: code > config file > built-in defaults
#   - 配置文件中的 ${VAR} / ${VAR:-default} 从环境变量展开
#     / ${VAR} / ${VAR:-default} in the config file expand from env vars
#   - 非法取值时抛出 ConfigurationError
#     / Raise ConfigurationError on invalid values
# =============================================================================

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """向导配置非法时抛出的异常。 / Raised when wizard settings are invalid."""
    pass


# =============================================================================
# 数据结构 / Data Structures
# =============================================================================


@dataclass
class AdvisorSettings:
    """外部 AI 顾问调用参数。 / External AI advisor call parameters."""

    enabled: bool = True
    timeout: float = 15.0  # 单次调用超时（秒） / Per-call timeout (seconds)
    memo_timeout: float = 20.0  # 备忘录润色允许更久 / Memo polishing gets longer

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AdvisorSettings:
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"advisor 配置必须是字典，实际为 {type(data).__name__}"
            )
        return cls(
            enabled=_to_bool(data.get("enabled", True)),
            timeout=float(data.get("timeout", 15.0)),
            memo_timeout=float(data.get("memo_timeout", 20.0)),
        )


@dataclass
class WizardSettings:
    """向导运行时配置。 / Wizard runtime settings."""

    trials: int = 10000  # Monte Carlo 抽样次数 / Monte Carlo sample count
    risk_stage_cutoff: float = 100000  # 经济门槛高于此值才进入风险阶段 / Risk stage only above this threshold
    random_seed: Optional[int] = None  # 固定种子用于复现 / Fixed seed for reproducible runs
    max_risks: int = 5
    advisor: AdvisorSettings = field(default_factory=AdvisorSettings)

    # --- 可选：未识别字段（保留，不报错） / Optional: unknown keys (kept, not an error) ---
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = ("trials", "risk_stage_cutoff", "random_seed", "max_risks", "advisor")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WizardSettings:
        """从合并后的字典构建并校验配置。 / Build and validate settings from a merged dict."""
        try:
            seed = data.get("random_seed")
            settings = cls(
                trials=int(data.get("trials", 10000)),
                risk_stage_cutoff=float(data.get("risk_stage_cutoff", 100000)),
                random_seed=int(seed) if seed not in (None, "") else None,
                max_risks=int(data.get("max_risks", 5)),
                advisor=AdvisorSettings.from_dict(data.get("advisor") or {}),
                extra={
                    k: v for k, v in data.items() if k not in cls._KNOWN_KEYS
                },
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"向导配置取值无法解析: {e}") from e
        settings.validate()
        return settings

    def validate(self) -> None:
        """校验取值范围。 / Validate value ranges.

        Raises:
            ConfigurationError: 任一取值越界。 / Any value out of range.
        """
        if self.trials < 1:
            raise ConfigurationError(f"trials 必须 >= 1，实际为 {self.trials}")
        if self.risk_stage_cutoff < 0:
            raise ConfigurationError(
                f"risk_stage_cutoff 必须 >= 0，实际为 {self.risk_stage_cutoff}"
            )
        if self.max_risks < 1:
            raise ConfigurationError(f"max_risks 必须 >= 1，实际为 {self.max_risks}")
        if self.advisor.timeout <= 0 or self.advisor.memo_timeout <= 0:
            raise ConfigurationError(
                "advisor.timeout / advisor.memo_timeout 必须 > 0"
            )


# =============================================================================
# 配置加载器 / Config Loader
# =============================================================================


class SettingsLoader:
    """向导配置加载器: 实现三层优先级配置合并。
    / Wizard settings loader: three-tier priority merging.

    优先级（高→低） / Priority (high→low):
    1. 代码传入（settings 字典参数） / Code-level dict
    2. 配置文件（YAML） / Config file (YAML)
    3. 内置默认值 / Built-in defaults

    settings 字典格式 / Dict format:
    {
        "trials": 10000,
        "risk_stage_cutoff": 100000,
        "random_seed": 42,
        "advisor": {"timeout": 15, "memo_timeout": 20, "enabled": true},
    }
    """

    # 配置文件搜索路径（按优先级） / Config file search paths (by priority)
    _CONFIG_SEARCH_PATHS = [
        "decisionlab.yaml",
        "decisionlab.yml",
        "config/decisionlab.yaml",
        "config/decisionlab.yml",
    ]

    def __init__(
        self,
        settings: Optional[Dict[str, Any]] = None,
        config_file: Optional[str] = None,
    ):
        """初始化配置加载器。 / Initialize settings loader.

        Args:
            settings: 代码传入的配置字典（最高优先级）。 / Code-level dict (highest priority).
            config_file: 配置文件路径（不传则自动搜索）。 / Config file path (auto-search if omitted).
        """
        self._code_config = settings or {}
        self._file_config: Dict[str, Any] = {}
        self._source: Optional[Path] = None

        self._load_config_file(config_file)

    @property
    def source(self) -> Optional[Path]:
        """实际加载的配置文件路径。 / Path of the loaded config file, if any."""
        return self._source

    def _load_config_file(self, config_file: Optional[str]) -> None:
        """加载配置文件（YAML）。 / Load config file (YAML)."""
        if config_file:
            path = Path(config_file)
            if path.exists():
                self._file_config = self._read_yaml(path)
                self._source = path
                logger.info("向导配置文件已加载: %s", path)
            else:
                logger.warning("指定的向导配置文件不存在: %s", path)
            return

        # 自动搜索默认路径 / Auto-search default paths
        for search_path in self._CONFIG_SEARCH_PATHS:
            path = Path(search_path)
            if path.exists():
                self._file_config = self._read_yaml(path)
                self._source = path
                logger.info("自动发现向导配置文件: %s", path)
                return

        logger.debug("未发现向导配置文件，使用代码配置与默认值")

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        """读取 YAML 文件并展开环境变量引用。 / Read YAML and expand env var refs."""
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"配置文件顶层必须是映射: {path}")
        return _expand_env_vars(raw)

    def resolve(self) -> WizardSettings:
        """合并三层配置并返回校验后的 WizardSettings。
        / Merge the three tiers and return validated WizardSettings.

        advisor 子节按键合并，而不是整体覆盖。
        / The advisor section merges key by key instead of being replaced whole.

        Raises:
            ConfigurationError: 合并后的取值非法。 / Merged values are invalid.
        """
        merged: Dict[str, Any] = {}
        advisor: Dict[str, Any] = {}

        for layer in (self._file_config, self._code_config):
            for key, value in layer.items():
                if value is None:
                    continue
                if key == "advisor" and isinstance(value, dict):
                    advisor.update({k: v for k, v in value.items() if v is not None})
                else:
                    merged[key] = value

        merged["advisor"] = advisor
        return WizardSettings.from_dict(merged)

    def summary(self) -> Dict[str, str]:
        """输出配置摘要，用于日志/调试。 / Output a config summary for logging/debug."""
        settings = self.resolve()
        return {
            "source": str(self._source) if self._source else "(defaults)",
            "trials": str(settings.trials),
            "risk_stage_cutoff": str(settings.risk_stage_cutoff),
            "random_seed": str(settings.random_seed),
            "max_risks": str(settings.max_risks),
            "advisor_enabled": str(settings.advisor.enabled),
            "advisor_timeout": str(settings.advisor.timeout),
        }


def load_settings(
    settings: Optional[Dict[str, Any]] = None,
    config_file: Optional[str] = None,
) -> WizardSettings:
    """便捷入口：加载并解析向导配置。 / Convenience entry: load and resolve settings."""
    return SettingsLoader(settings=settings, config_file=config_file).resolve()


# =============================================================================
# 工具函数 / Utility Functions
# =============================================================================

_ENV_REF = re.compile(r"\$\{([^}]+)\}")


def _expand_env_vars(obj: Any) -> Any:
    """递归展开字典/列表中的 ${ENV_VAR} 引用。 / Recursively expand ${ENV_VAR} refs in dicts/lists.

    支持格式 / Supported formats:
    - ${VAR_NAME}          → os.environ["VAR_NAME"]
    - ${VAR_NAME:-default} → os.environ.get("VAR_NAME", "default")
    """
    if isinstance(obj, str):

        def _replace(match):
            var_expr = match.group(1)
            if ":-" in var_expr:
                var_name, default = var_expr.split(":-", 1)
                return os.environ.get(var_name.strip(), default.strip())
            return os.environ.get(var_expr.strip(), match.group(0))

        return _ENV_REF.sub(_replace, obj)

    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


def _to_bool(value: Any) -> bool:
    """环境变量展开后布尔值可能是字符串。 / Booleans may arrive as strings after env expansion."""
    if isinstance(value, str):
        return value.strip().lower() not in ("0", "false", "no", "off", "")
    return bool(value)

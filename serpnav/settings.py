from pathlib import Path
from urllib.parse import quote_plus, urlparse
from pydantic import BaseModel, ConfigDict
from dataclasses import dataclass, field, fields
from loguru import logger
import yaml

class ProxySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    server: str | None = None
    username: str | None = None
    password: str | None = None

    def playwright_proxy(self) -> dict | None:
        """
        Proxy dict in the shape Playwright's launch() expects:
            {"server": server, "username": ..., "password": ...}

        None when the proxy is disabled or has no server.
        """
        if not (self.enabled and self.server):
            return None
        proxy = {"server": self.server}
        if self.username and self.password:
            proxy["username"] = self.username
            proxy["password"] = self.password
        return proxy

def load_proxy_from_txt(path: str | Path, enabled: bool = True) -> ProxySettings:
    """
    Load proxy settings from a text file containing a single URL line.

    The file itself (e.g. data/ProxyURL.txt) is git-ignored.
    A template like data/ProxyURL.example.txt can be committed instead.
    """

    p = Path(path)
    if not p.is_absolute():
        p = Path.cwd() / p

    if not p.exists():
        logger.warning(f"Proxy file not found: {p}")
        return ProxySettings()

    raw = p.read_text(encoding="utf-8").strip()
    if not raw:
        logger.warning(f"Proxy file is empty: {p}")
        return ProxySettings()

    lines = [ln.strip().strip('"').strip("'") for ln in raw.splitlines() if ln.strip()]
    line = lines[0]

    parsed = urlparse(line)
    if not parsed.scheme or not parsed.hostname:
        logger.warning(f"Proxy line does not look like a URL: {line}")
        return ProxySettings()

    server = f"{parsed.scheme}://{parsed.hostname}"
    if parsed.port:
        server += f":{parsed.port}"

    return ProxySettings(
        enabled=enabled,
        server=server,
        username=parsed.username,
        password=parsed.password,
    )


@dataclass(frozen=True)
class ExtractionPolicy:
    """
    Settings for the JSON-LD extraction step.

    `schema_types` is informational only: it is logged, never used as a filter.
    """
    anonymize_phone_numbers: bool = True
    save_to_disk: bool = True
    schema_types: tuple[str, ...] = ("Organization", "LocalBusiness", "Product", "WebSite")


@dataclass(frozen=True)
class RunConfig:
    """
    Immutable configuration for one search-and-click run.

    Values can be overridden via run_config.yaml (see load_run_config).
    A relative `output_dir` resolves against the current working directory.
    """

    # Search
    query: str = "example domain"
    target_domain: str = "example.com"
    search_engine_url: str = "https://www.google.com/search?q="

    # Browser tuning
    headless: bool = True
    timeout_ms: int = 30_000
    screenshots: bool = True
    rotate_user_agent: bool = True
    user_agent: str = "Mozilla/5.0"
    locale: str = "en-US"

    # Retries
    max_retries: int = 3
    cooldown_s: float = 2.0

    # Output root for logs/, screenshots/, data/ and results/
    output_dir: str = "."

    proxy: ProxySettings = field(default_factory=ProxySettings)
    extraction: ExtractionPolicy | None = None

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")
        if not self.query.strip():
            raise ValueError("query must not be empty")
        if not self.target_domain.strip():
            raise ValueError("target_domain must not be empty")

    def search_url(self) -> str:
        return self.search_engine_url + quote_plus(self.query)

    @property
    def output_path(self) -> Path:
        p = Path(self.output_dir)
        return p if p.is_absolute() else Path.cwd() / p


def _build_proxy(data) -> ProxySettings:
    if not isinstance(data, dict):
        return ProxySettings()
    if data.get("file"):
        return load_proxy_from_txt(data["file"], enabled=bool(data.get("enabled", True)))
    allowed_keys = set(ProxySettings.model_fields)
    return ProxySettings(**{k: v for k, v in data.items() if k in allowed_keys})


def _build_extraction(data) -> ExtractionPolicy | None:
    if not isinstance(data, dict) or not data.get("enabled", True):
        return None
    allowed_keys = {f.name for f in fields(ExtractionPolicy)}
    filtered = {k: v for k, v in data.items() if k in allowed_keys}
    if "schema_types" in filtered:
        filtered["schema_types"] = tuple(filtered["schema_types"] or ())
    return ExtractionPolicy(**filtered)


def load_run_config(path: str | Path | None = None) -> RunConfig:
    """
    Load RunConfig from YAML if present; otherwise use defaults.

    By default, looks for `run_config.yaml` in the current working directory.
    Nested `proxy:` and `extraction:` mappings build their sub-settings;
    a missing `extraction:` block means the run does not scrape JSON-LD.
    """

    if path is None:
        path = Path.cwd() / "run_config.yaml"

    path = Path(path)

    if not path.exists():
        logger.warning(f"[config] YAML not found at {path}, using defaults")
        return RunConfig()

    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}

    if not isinstance(data, dict):
        logger.warning(f"[config] Expected mapping in {path}, got {type(data)}, using defaults")
        return RunConfig()

    allowed_keys = {f.name for f in fields(RunConfig)} - {"proxy", "extraction"}
    filtered = {k: v for k, v in data.items() if k in allowed_keys}

    return RunConfig(
        **filtered,
        proxy=_build_proxy(data.get("proxy")),
        extraction=_build_extraction(data.get("extraction")),
    )

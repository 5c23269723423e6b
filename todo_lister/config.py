import os, yaml, pathlib, re
from dotenv import load_dotenv

from .errors import ConfigError

def _merge(a, b):
    if not isinstance(b, dict): return a
    out = a.copy()
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out

def default_config():
    return {
        "vault": {"path": os.getenv("VAULT_PATH", ".")},
        "index": {
            "extensions": [".md"],
            "ignore_dirs": [".git", ".obsidian", ".trash", ".todo-lister"],
        },
        "watch": {"recursive": True},
        "server": {"host": "127.0.0.1", "port": 5052},
        "logging": {"level": os.getenv("TODO_LISTER_LOG_LEVEL", "INFO")},
    }

def load_configs(root=None):
    load_dotenv(override=True)
    root = pathlib.Path(root or os.getenv("TODO_LISTER_ROOT", ".todo-lister"))
    settings_yml = root / "config" / "settings.yml"
    cfg = default_config()
    if settings_yml.exists():
        data = yaml.safe_load(settings_yml.read_text(encoding="utf-8"))
        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"{settings_yml} must contain a mapping, got {type(data).__name__}")
        cfg = _merge(cfg, data or {})
    cfg = _expand_env_vars(cfg)
    cfg["index"]["extensions"] = [_normalize_ext(e) for e in cfg["index"].get("extensions") or []]
    cfg["_root"] = str(root)
    return cfg

def _normalize_ext(ext: str) -> str:
    ext = str(ext).strip().lower()
    return ext if ext.startswith(".") else "." + ext

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z0-9_]+)\}")

def _expand_env_vars(obj):
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    if isinstance(obj, str):
        def repl(m):
            key = m.group(1)
            return os.getenv(key, m.group(0))
        return _ENV_VAR_PATTERN.sub(repl, obj)
    return obj

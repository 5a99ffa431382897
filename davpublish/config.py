import json
import logging
import os
from dataclasses import asdict
from dataclasses import dataclass
from typing import Any
from typing import Dict
from typing import Optional
from typing import Tuple
from typing import Union

from davpublish.lib.auth import SUPPORTED_AUTH_TYPES
from davpublish.lib.error import ConfigurationError

"""
Connection configuration.  It's read once at startup and handed to the
DAVClient; nothing in the library reads the environment behind your
back.

Sources, in order of precedence:

* explicit parameters (i.e. from the command line)
* environment variables prepended with `CALDAV_`, like `CALDAV_URL`,
  `CALDAV_USERNAME`, `CALDAV_PASSWORD`
* a configuration file, json (or yaml if pyyaml is installed), with
  sections of `caldav_*` keys:

    {"default": {"caldav_url": "https://cal.example.com",
                 "caldav_user": "alice", "caldav_pass": "hunter2"}}
"""

log = logging.getLogger("davpublish")

## keys accepted by DAVClient, as they appear in the environment and config files
CONNKEYS = (
    "url",
    "username",
    "password",
    "timeout",
    "ssl_verify_cert",
    "auth_type",
    "proxy",
    "ssl_cert",
    "huge_tree",
)

## short forms used in config files
KEY_ALIASES = {"user": "username", "pass": "password"}


@dataclass(frozen=True)
class ConnectionConfig:
    url: str
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: Optional[float] = 10
    ssl_verify_cert: Union[bool, str] = True
    auth_type: Optional[str] = None
    proxy: Optional[str] = None
    ## client side certificate, a file or "cert.pem,key.pem"
    ssl_cert: Union[str, Tuple[str, str], None] = None
    huge_tree: Optional[bool] = None

    def __repr__(self) -> str:
        ## never leak the password into logs
        password = "***" if self.password else None
        return (
            f"ConnectionConfig(url={self.url!r}, username={self.username!r}, "
            f"password={password!r}, timeout={self.timeout!r}, "
            f"ssl_verify_cert={self.ssl_verify_cert!r}, auth_type={self.auth_type!r}, "
            f"proxy={self.proxy!r}, ssl_cert={self.ssl_cert!r}, "
            f"huge_tree={self.huge_tree!r})"
        )

    def client_kwargs(self) -> Dict[str, Any]:
        """Parameters for DAVClient(**kwargs), unset values left out"""
        return {k: v for k, v in asdict(self).items() if v is not None}


def _to_bool_or_path(value: Any) -> Union[bool, str]:
    if isinstance(value, bool):
        return value
    text = str(value).strip()
    if text.lower() in ("0", "false", "no", "off"):
        return False
    if text.lower() in ("1", "true", "yes", "on", ""):
        return True
    ## anything else is the path of a CA bundle
    return text


def _coerce(key: str, value: Any) -> Any:
    if key == "timeout":
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"timeout must be a number, got {value!r}") from exc
    if key == "ssl_verify_cert":
        return _to_bool_or_path(value)
    if key == "auth_type":
        auth_type = str(value).strip().lower()
        if auth_type not in SUPPORTED_AUTH_TYPES:
            raise ConfigurationError(
                f"auth_type must be one of {', '.join(SUPPORTED_AUTH_TYPES)}, got {value!r}"
            )
        return auth_type
    if key == "ssl_cert" and isinstance(value, str) and "," in value:
        cert, key_file = (x.strip() for x in value.split(",", 1))
        return (cert, key_file)
    if key == "huge_tree":
        huge_tree = _to_bool_or_path(value)
        if not isinstance(huge_tree, bool):
            raise ConfigurationError(f"huge_tree must be a boolean, got {value!r}")
        return huge_tree
    return value


def config_section(config: Dict[str, Any], section: str = "default") -> Dict[str, Any]:
    """
    Return the section, with the values of the section named by the
    "inherits" keyword (recursively) as defaults.
    """
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def read_config(fn: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Read a json (or yaml) config file.  Without a file name, the
    usual locations are tried in order.  Returns {} on a missing or
    broken file.
    """
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config"
        for config_file in (
            f"{cfgdir}/davpublish/calendar.conf",
            f"{cfgdir}/davpublish/calendar.yaml",
            f"{cfgdir}/davpublish/calendar.json",
            f"{cfgdir}/calendar.conf",
            "/etc/davpublish/calendar.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## Late import, yaml is an optional dependency
            try:
                import yaml
            except ImportError:
                log.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )
                return {}
            try:
                with open(fn, "rb") as config_file:
                    return yaml.safe_load(config_file) or {}
            except yaml.YAMLError:
                log.error(
                    f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                )
    except FileNotFoundError:
        log.debug(f"no config file found at {fn}")
    except (OSError, ValueError):
        log.error(f"error in config file {fn}.  It will be ignored", exc_info=True)
    return {}


def _from_environment(environ=None) -> Dict[str, Any]:
    environ = os.environ if environ is None else environ
    conf = {}
    for key in CONNKEYS:
        env_key = "CALDAV_" + key.upper()
        if environ.get(env_key):
            conf[key] = environ[env_key]
    return conf


def _from_config_file(config_file, section) -> Dict[str, Any]:
    cfg = read_config(config_file)
    if not cfg:
        return {}
    if section not in cfg:
        if config_file:
            log.warning(f"section {section} not found in {config_file}")
        return {}
    conf = {}
    found = config_section(cfg, section)
    for k in found:
        if k.startswith("caldav_") and found[k] not in (None, ""):
            key = k[7:]
            key = KEY_ALIASES.get(key, key)
            if key in CONNKEYS:
                conf[key] = found[k]
    return conf


def get_connection_config(
    config_file: Optional[str] = None,
    config_section: Optional[str] = None,
    environment: bool = True,
    check_config_file: bool = True,
    environ=None,
    **params,
) -> ConnectionConfig:
    """
    Collect the connection parameters from the parameters given, the
    environment and the config file, in that order of precedence.

    Raises:
      ConfigurationError: no URL to be found, or a broken value
    """
    environ = os.environ if environ is None else environ
    conf: Dict[str, Any] = {}

    if check_config_file:
        if environment:
            config_file = config_file or environ.get("CALDAV_CONFIG_FILE")
            config_section = config_section or environ.get("CALDAV_CONFIG_SECTION")
        conf.update(_from_config_file(config_file, config_section or "default"))

    if environment:
        conf.update(_from_environment(environ))

    for key in params:
        if key not in CONNKEYS:
            raise ConfigurationError(f"unknown connection parameter {key}")
        if params[key] is not None:
            conf[key] = params[key]

    if not conf.get("url"):
        raise ConfigurationError(
            "No CalDAV server given.  Set CALDAV_URL or pass the url explicitly"
        )

    config = ConnectionConfig(**{k: _coerce(k, v) for k, v in conf.items()})
    log.debug(f"connection config: {config!r}")
    return config

"""
Configuration for CRL checks.

Settings can be supplied programmatically, from a dictionary, or from a
YAML file. As a matter of course, hyphens in key names are converted
to underscores.
"""

import dataclasses
from typing import Optional

import yaml

__all__ = [
    'ConfigurationError',
    'ConfigurableMixin',
    'CRLCheckConfig',
    'check_config_keys',
    'parse_config',
    'load_config',
]


def _has_default(f: dataclasses.Field):
    return (
        f.default_factory is not dataclasses.MISSING
        or f.default is not dataclasses.MISSING
    )


class ConfigurationError(ValueError):
    """Signal configuration errors."""
    pass


@dataclasses.dataclass(frozen=True)
class ConfigurableMixin:
    """General configuration mixin for dataclasses"""

    @classmethod
    def process_entries(cls, config_dict):
        """
        Hook method that can modify the configuration dictionary
        to overwrite or tweak some of their values.

        Subclasses that override this method should call
        ``super().process_entries()``, and leave keys that they do not
        recognise untouched.

        :raises ConfigurationError:
            when there is a problem processing a relevant entry.
        """
        pass

    @classmethod
    def from_config(cls, config_dict):
        """
        Instantiate the class on which it is called from a dictionary of
        configuration settings.

        :param config_dict:
            A dictionary containing configuration values.
        :return:
            An instance of the class on which it is called.
        :raises ConfigurationError:
            when an unexpected configuration key is encountered or left
            unfilled, or when there is a problem processing one of the config
            values.
        """
        check_config_keys(
            cls.__name__, {f.name for f in dataclasses.fields(cls)},
            config_dict
        )
        # in Python we need underscores
        config_dict = {
            key.replace('-', '_'): v for key, v in config_dict.items()
        }

        cls.process_entries(config_dict)

        enforce_required_keys(
            cls.__name__, {
                f.name for f in dataclasses.fields(cls) if not _has_default(f)
            }, config_dict
        )
        try:
            return cls(**config_dict)
        except TypeError as e:  # pragma: nocover
            raise ConfigurationError(e)


def check_config_keys(config_name, expected_keys, config_dict):
    # This does not check whether all required keys are present, that happens
    # later
    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"{config_name} requires a dictionary to initialise."
        )
    unexpected_keys = _check_subset(config_dict.keys(), expected_keys)
    if unexpected_keys:
        raise ConfigurationError(
            f"Unexpected {'key' if len(unexpected_keys) == 1 else 'keys'} "
            f"in configuration for {config_name}: "
            f"{', '.join(sorted(unexpected_keys))}."
        )


def _check_subset(expected_sub, expected_sup):
    # standardise on dashes for the yaml interface
    expected_sub = {key.replace('_', '-') for key in expected_sub}
    expected_sup = {key.replace('_', '-') for key in expected_sup}
    return expected_sub - expected_sup


def enforce_required_keys(config_name, required_keys, config_dict):
    missing_keys = _check_subset(required_keys, config_dict.keys())
    if missing_keys:
        raise ConfigurationError(
            f"Missing required {'key' if len(missing_keys) == 1 else 'keys'} "
            f"in configuration for {config_name}: "
            f"{', '.join(sorted(missing_keys))}."
        )


@dataclasses.dataclass(frozen=True)
class CRLCheckConfig(ConfigurableMixin):
    """
    Settings governing how CRLs are retrieved and how fetch failures are
    treated.
    """

    per_request_timeout: int = 10
    """
    Timeout (in seconds) for a single HTTP, FTP or LDAP request.
    """

    user_agent: Optional[str] = None
    """
    User agent to send with HTTP requests. If ``None``, a default of the
    form ``crlverify <version>`` is used.
    """

    continue_on_fetch_failure: bool = False
    """
    If ``True``, failure to fetch or decode a CRL from one distribution point
    causes the next one to be tried. By default, the first failure is final,
    since all URLs in a distribution point refer to the same CRL.
    """

    @classmethod
    def process_entries(cls, config_dict):
        super().process_entries(config_dict)

        timeout = config_dict.get('per_request_timeout', None)
        if timeout is not None and (
            isinstance(timeout, bool)
            or not isinstance(timeout, int)
            or timeout <= 0
        ):
            raise ConfigurationError(
                "per-request-timeout must be a positive number of seconds"
            )

        user_agent = config_dict.get('user_agent', None)
        if user_agent is not None and not isinstance(user_agent, str):
            raise ConfigurationError("user-agent must be a string")

        cont = config_dict.get('continue_on_fetch_failure', None)
        if cont is not None and not isinstance(cont, bool):
            raise ConfigurationError(
                "continue-on-fetch-failure must be a boolean"
            )


CONFIG_SECTION = 'crl-check'


def parse_config(config_dict) -> CRLCheckConfig:
    """
    Parse a configuration dictionary, optionally nested under
    a ``crl-check`` key.
    """
    if config_dict is None:
        return CRLCheckConfig()
    if isinstance(config_dict, dict) and CONFIG_SECTION in config_dict:
        config_dict = config_dict[CONFIG_SECTION] or {}
    return CRLCheckConfig.from_config(config_dict)


def load_config(fname) -> CRLCheckConfig:
    """
    Read a :class:`CRLCheckConfig` from a YAML file.

    :raises ConfigurationError:
        if the file does not contain valid YAML or valid settings.
    """
    with open(fname, 'r', encoding='utf-8') as inf:
        try:
            config_dict = yaml.safe_load(inf)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse configuration file {fname}"
            ) from e
    return parse_config(config_dict)

import os
import tomllib
from pathlib import Path
from typing import Annotated, Any, Mapping, TypeVar, cast

from msgspec import ValidationError, convert
from msgspec.structs import fields
from typing_extensions import Doc

from apibind.errors import ConfigurationError
from apibind.interface import Record, StrDict

ENV_PREFIX = "APIBIND_"
DEV_ENVS = ("dev", "development", "local")


class ConfigBase(Record, forbid_unknown_fields=True, frozen=True): ...


class BinderConfig(ConfigBase):
    is_dev: Annotated[
        bool, Doc("Development deployment, every json response is indented")
    ] = False
    pretty_user_agents: Annotated[
        tuple[str, ...],
        Doc("User-Agent prefixes of interactive clients that get indented json"),
    ] = ("curl/",)
    to_thread: Annotated[
        bool, Doc("Whether sync functions run in a worker thread instead of the loop")
    ] = True
    identity_flag: Annotated[
        str, Doc("Feature flag that switches identity resolution to request claims")
    ] = "external-identity"
    identity_key: Annotated[
        str, Doc("Request state key holding the resolved identity id")
    ] = "identity_id"
    claims_key: Annotated[
        str, Doc("Request state key holding the verified token claims")
    ] = "claims"


TConfig = TypeVar("TConfig", bound=ConfigBase)


def format_nested_dict(flat_dict: StrDict) -> StrDict:
    """
    Convert a flat dictionary with dot notation keys to a nested dictionary.

    Example:
        {"server.port": 8000} -> {"server": {"port": 8000}}
    """
    result: StrDict = {}

    for key, value in flat_dict.items():
        if "." in key:
            parts = key.split(".")
            current = result
            for part in parts[:-1]:
                if part not in current:
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = value
        else:
            result[key] = value
    return result


def deep_update(original: StrDict, update_data: StrDict) -> StrDict:
    """
    Recursively update a nested dictionary without overwriting entire nested structures.
    """

    def both_instance(a: Any, b: Any, t: type) -> bool:
        return isinstance(a, t) and isinstance(b, t)

    for key, value in update_data.items():
        if key not in original:
            original[key] = value
        else:
            ori_val = original[key]
            if both_instance(ori_val, value, dict):
                deep_update(cast(StrDict, ori_val), cast(StrDict, value))
            else:
                original[key] = value
    return original


def config_from_env(
    environ: Mapping[str, str], config_type: type[ConfigBase] = BinderConfig
) -> StrDict:
    """
    collect `APIBIND_<FIELD>` overrides, nested fields use double underscore,
    `APIBIND_ENV=dev` switches on `is_dev`.
    """
    known = {f.encode_name for f in fields(config_type)}
    flat: StrDict = {}

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key.removeprefix(ENV_PREFIX).lower().replace("__", ".")
        if name == "env":
            if "is_dev" in known:
                flat["is_dev"] = value.lower() in DEV_ENVS
            continue
        if name.split(".")[0] not in known:
            continue
        if name == "pretty_user_agents":
            flat[name] = [ua.strip() for ua in value.split(",") if ua.strip()]
        else:
            flat[name] = value
    return format_nested_dict(flat)


def config_from_file(
    *config_files: str | Path,
    config_type: type[TConfig] = BinderConfig,
    environ: Mapping[str, str] | None = None,
) -> TConfig:
    """
    Read one or more toml files, later ones override earlier ones,
    then apply environment overrides.

    ```python
    config = config_from_file("binder.toml", "binder.prod.toml")
    ```
    """
    config_dict: StrDict = {}
    for config_file in config_files:
        file_path = Path(config_file)
        try:
            data = tomllib.loads(file_path.read_text())
        except FileNotFoundError as exc:
            raise ConfigurationError(f"config file {file_path} not found") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"invalid toml in {file_path}: {exc}") from exc
        deep_update(config_dict, data)

    env_config = config_from_env(os.environ if environ is None else environ, config_type)
    if env_config:
        deep_update(config_dict, env_config)

    try:
        return convert(config_dict, config_type, strict=False)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid config: {exc}") from exc

"""Configuration Builder — validated, named topology options.

Manifesto:
Engine configuration objects expose one setter per option
(``setNumWorkers``, ``setMaxSpoutPending`` ...).  Rather than forwarding
whatever attribute a configure hook happens to touch, every option is
declared in an explicit schema with a validated value type and the
engine setter it maps to.  Typos and bad values fail before the engine
config is modified.

ARCHITECTURE
────────────
::

    ConfigOption(name, annotation, setter, description)
    CONFIG_SCHEMA            ── the recognized options (read-only)
    register_option(...)     ── extend a copied schema explicitly

    ConfigBuilder(engine_config, schema=CONFIG_SCHEMA)
      ├── .set(name, value)        ── validate -> config.<setter>(value)
      ├── .update(**options)       ── set() for each, in order
      ├── .options                 ── applied values (name -> value)
      └── .<name> = value          ── attribute form of set()

Example::

    def configure(config, env):
        config.debug = env == "local"
        config.update(num_workers=4, max_spout_pending=1000)

Tags:
    stream-spine, topology, configuration, pydantic, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import Field, TypeAdapter, ValidationError

from streamspine.core.errors import InvalidConfigError
from streamspine.core.logging import get_logger
from streamspine.core.naming import camel_case

logger = get_logger(__name__)

PositiveInt = Annotated[int, Field(ge=1)]
NonNegativeInt = Annotated[int, Field(ge=0)]
SampleRate = Annotated[float, Field(ge=0.0, le=1.0)]


@dataclass(frozen=True)
class ConfigOption:
    """One recognized configuration option."""

    name: str
    annotation: Any
    setter: str
    description: str = ""
    adapter: TypeAdapter = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "adapter", TypeAdapter(self.annotation))

    def validate(self, value: Any) -> Any:
        try:
            return self.adapter.validate_python(value)
        except ValidationError as exc:
            reason = exc.errors()[0]["msg"] if exc.errors() else str(exc)
            raise InvalidConfigError(self.name, value, f"Invalid value for {self.name}: {reason}") from exc


def register_option(
    schema: dict[str, ConfigOption],
    name: str,
    annotation: Any,
    description: str = "",
    *,
    setter: str | None = None,
) -> ConfigOption:
    """Add an option to ``schema``; the setter defaults to ``set`` + CamelCase.

    ``CONFIG_SCHEMA`` is read-only, so custom options go into a copy of it::

        schema = dict(CONFIG_SCHEMA)
        register_option(schema, "worker_heap_mb", PositiveInt)
        ConfigBuilder(engine.config(), schema)
    """
    option = ConfigOption(
        name=name,
        annotation=annotation,
        setter=setter or f"set{camel_case(name)}",
        description=description,
    )
    schema[name] = option
    return option


_DEFAULT_OPTIONS: dict[str, ConfigOption] = {}

register_option(_DEFAULT_OPTIONS, "debug", bool, "Log every emitted tuple")
register_option(_DEFAULT_OPTIONS, "num_workers", PositiveInt, "Worker processes for the topology")
register_option(_DEFAULT_OPTIONS, "num_ackers", NonNegativeInt, "Acker executors")
register_option(_DEFAULT_OPTIONS, "max_task_parallelism", PositiveInt, "Upper bound on any component's parallelism")
register_option(_DEFAULT_OPTIONS, "max_spout_pending", PositiveInt, "Un-acked tuples allowed per spout task")
register_option(_DEFAULT_OPTIONS, "message_timeout_secs", PositiveInt, "Seconds before a tuple tree is failed")
register_option(_DEFAULT_OPTIONS, "stats_sample_rate", SampleRate, "Fraction of tuples sampled for stats")
register_option(_DEFAULT_OPTIONS, "fall_back_on_java_serialization", bool, "Allow default serialization fallback")
register_option(_DEFAULT_OPTIONS, "skip_missing_kryo_registrations", bool, "Ignore unknown serializer registrations")
register_option(_DEFAULT_OPTIONS, "topology_worker_childopts", str, "Extra worker JVM options")

# Read-only; see register_option for extending a copy.
CONFIG_SCHEMA: Mapping[str, ConfigOption] = MappingProxyType(_DEFAULT_OPTIONS)


class ConfigBuilder:
    """Applies validated options to an engine configuration object."""

    def __init__(self, config: Any, schema: Mapping[str, ConfigOption] | None = None) -> None:
        object.__setattr__(self, "config", config)
        object.__setattr__(self, "schema", CONFIG_SCHEMA if schema is None else schema)
        object.__setattr__(self, "options", {})

    def set(self, name: str, value: Any) -> ConfigBuilder:
        """Validate ``value`` and pass it to the engine setter for ``name``.

        Raises:
            InvalidConfigError: Unknown option or invalid value
        """
        option = self.schema.get(name)
        if option is None:
            known = ", ".join(sorted(self.schema))
            raise InvalidConfigError(name, value, f"Unknown config option '{name}'. Known: {known}")
        validated = option.validate(value)
        getattr(self.config, option.setter)(validated)
        self.options[name] = validated
        logger.debug("config_option_set", option=name, value=validated)
        return self

    def update(self, **options: Any) -> ConfigBuilder:
        for name, value in options.items():
            self.set(name, value)
        return self

    def __setattr__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __getattr__(self, name: str) -> Any:
        options = self.__dict__.get("options", {})
        if name in options:
            return options[name]
        raise AttributeError(name)

    def __repr__(self) -> str:
        return f"ConfigBuilder(options={self.options!r})"

"""Tests for typed configuration parameters."""

from __future__ import annotations

import pydantic
import pytest
from hypothesis import given
from hypothesis import strategies as st

from operator_config.parameter import (
    BoolParameter,
    ChoiceParameter,
    FloatParameter,
    IntParameter,
    ParameterOption,
    StringParameter,
    Uint16Parameter,
    UintParameter,
)
from operator_config.types import (
    ConstraintViolationError,
    ContainerID,
    MissingDefaultError,
    Mode,
    Network,
    TypeConversionError,
    Uint16,
    Uint64,
)


def make_port(default: int = 8545) -> Uint16Parameter:
    return Uint16Parameter(
        id="httpPort",
        name="HTTP Port",
        defaults={Network.ALL: default},
        affected_containers=[ContainerID.ETH1, ContainerID.API],
        env_vars=["EC_HTTP_PORT", "HTTP_PORT"],
    )


def make_gateway() -> StringParameter:
    return StringParameter(
        id="gatewayID",
        name="Gateway ID",
        defaults={Network.MAINNET: "mainnet-gateway", Network.PRATER: "prater-gateway"},
    )


def make_mode() -> ChoiceParameter[Mode]:
    return ChoiceParameter[Mode](
        id="executionClientMode",
        name="Execution Client Mode",
        defaults={Network.ALL: Mode.LOCAL},
        options=[
            ParameterOption(name="Locally Managed", value=Mode.LOCAL),
            ParameterOption(name="Externally Managed", value=Mode.EXTERNAL),
        ],
    )


class TestConstruction:
    """A fresh parameter starts at a default and normalizes its collections."""

    def test_starts_at_wildcard_default(self) -> None:
        """The wildcard default is the initial value."""
        port = make_port()
        assert port.value == Uint16(8545)
        assert isinstance(port.value, Uint16)

    def test_starts_at_primary_network_default_without_wildcard(self) -> None:
        """Without a wildcard the primary network's default is used."""
        assert make_gateway().value == "mainnet-gateway"

    def test_collections_are_immutable(self) -> None:
        """Containers become a frozenset and env vars a tuple."""
        port = make_port()
        assert port.affected_containers == frozenset({ContainerID.ETH1, ContainerID.API})
        assert port.env_vars == ("EC_HTTP_PORT", "HTTP_PORT")

    def test_initial_value_must_satisfy_constraints(self) -> None:
        """A default that breaks a constraint is rejected at construction."""
        with pytest.raises(pydantic.ValidationError):
            StringParameter(
                id="graffiti",
                name="Graffiti",
                defaults={Network.ALL: "far too long for the limit"},
                max_length=16,
            )

    def test_unknown_fields_are_rejected(self) -> None:
        """Typos in parameter definitions fail loudly."""
        with pytest.raises(pydantic.ValidationError):
            BoolParameter(
                id="enabled",
                name="Enabled",
                defaults={Network.ALL: True},
                canBeEmpty=True,
            )


class TestDefaults:
    """Default resolution and network switches."""

    def test_resolve_exact_network_first(self) -> None:
        """A network-specific default beats the wildcard."""
        param = StringParameter(
            id="url",
            name="URL",
            defaults={Network.ALL: "generic", Network.PRATER: "testnet"},
        )
        assert param.resolve_default(Network.PRATER) == "testnet"
        assert param.resolve_default(Network.MAINNET) == "generic"

    def test_missing_default_raises(self) -> None:
        """No entry and no wildcard is an error naming the parameter."""
        param = StringParameter(id="url", name="URL", defaults={Network.MAINNET: "a"})
        with pytest.raises(MissingDefaultError) as exc_info:
            param.resolve_default(Network.PRATER)
        assert exc_info.value.parameter_id == "url"

    def test_apply_default(self) -> None:
        """apply_default resets a user value."""
        gateway = make_gateway()
        gateway.value = "custom"
        gateway.apply_default(Network.PRATER)
        assert gateway.value == "prater-gateway"

    def test_network_change_follows_untouched_default(self) -> None:
        """A value equal to the old default moves to the new default."""
        gateway = make_gateway()
        gateway.change_network(Network.MAINNET, Network.PRATER)
        assert gateway.value == "prater-gateway"

    def test_network_change_keeps_user_value(self) -> None:
        """A value the user chose survives a network switch."""
        gateway = make_gateway()
        gateway.value = "my-own-gateway"
        gateway.change_network(Network.MAINNET, Network.PRATER)
        assert gateway.value == "my-own-gateway"

    def test_network_change_to_same_network_is_a_no_op(self) -> None:
        """Switching to the current network changes nothing."""
        gateway = make_gateway()
        gateway.value = "mainnet-gateway"
        assert gateway.value_after_network_change(Network.MAINNET, Network.MAINNET) == (
            "mainnet-gateway"
        )


class TestParsing:
    """String forms of each parameter type."""

    @pytest.mark.parametrize("text", ["1", "t", "T", "TRUE", "true", "True"])
    def test_bool_true_strings(self, text: str) -> None:
        """Every accepted spelling of true parses."""
        param = BoolParameter(id="b", name="B", defaults={Network.ALL: False})
        assert param.parse(text) is True

    @pytest.mark.parametrize("text", ["0", "f", "F", "FALSE", "false", "False"])
    def test_bool_false_strings(self, text: str) -> None:
        """Every accepted spelling of false parses."""
        param = BoolParameter(id="b", name="B", defaults={Network.ALL: True})
        assert param.parse(text) is False

    @pytest.mark.parametrize("text", ["yes", "", "tRuE", "2"])
    def test_bool_rejects_other_strings(self, text: str) -> None:
        """Anything else is a conversion error."""
        param = BoolParameter(id="b", name="B", defaults={Network.ALL: True})
        with pytest.raises(TypeConversionError):
            param.parse(text)

    def test_bool_format(self) -> None:
        """Booleans are written in lower case."""
        param = BoolParameter(id="b", name="B", defaults={Network.ALL: True})
        assert param.text == "true"
        assert param.format(False) == "false"

    @pytest.mark.parametrize("text, expected", [("-5", -5), ("+7", 7), ("0", 0)])
    def test_int_parses_signed(self, text: str, expected: int) -> None:
        """Signed integers parse."""
        param = IntParameter(id="i", name="I", defaults={Network.ALL: 0})
        assert param.parse(text) == expected

    @pytest.mark.parametrize("text", ["1.5", "", "0x10", " 1", "one"])
    def test_int_rejects_non_integers(self, text: str) -> None:
        """Only plain decimal integers are accepted."""
        param = IntParameter(id="i", name="I", defaults={Network.ALL: 0})
        with pytest.raises(TypeConversionError):
            param.parse(text)

    @pytest.mark.parametrize("text", ["-1", "+1", "18446744073709551616", "abc"])
    def test_uint_rejects_out_of_range(self, text: str) -> None:
        """Signs, overflow and non-digits are conversion errors."""
        param = UintParameter(id="u", name="U", defaults={Network.ALL: 0})
        with pytest.raises(TypeConversionError):
            param.parse(text)

    def test_uint_parses_to_uint64(self) -> None:
        """Unsigned values are wrapped in their width type."""
        param = UintParameter(id="u", name="U", defaults={Network.ALL: 0})
        value = param.parse("18446744073709551615")
        assert isinstance(value, Uint64)
        assert value == 2**64 - 1

    def test_uint16_overflow(self) -> None:
        """A port above 65535 does not convert."""
        with pytest.raises(TypeConversionError):
            make_port().parse("65536")

    @pytest.mark.parametrize("text, expected", [("1.5", 1.5), ("2", 2.0), ("1e3", 1000.0)])
    def test_float_parses(self, text: str, expected: float) -> None:
        """Decimal and exponent forms parse."""
        param = FloatParameter(id="f", name="F", defaults={Network.ALL: 0.0})
        assert param.parse(text) == expected

    @pytest.mark.parametrize("text", ["inf", "nan", "1e999", "", "1,5"])
    def test_float_rejects_non_finite(self, text: str) -> None:
        """Non-finite and malformed numbers are conversion errors."""
        param = FloatParameter(id="f", name="F", defaults={Network.ALL: 0.0})
        with pytest.raises(TypeConversionError):
            param.parse(text)

    def test_float_range(self) -> None:
        """Values below the minimum violate the range."""
        param = FloatParameter(id="f", name="F", defaults={Network.ALL: 0.0}, min_value=0.0)
        with pytest.raises(ConstraintViolationError):
            param.parse("-1")

    def test_string_max_length(self) -> None:
        """Strings longer than the limit are rejected."""
        param = StringParameter(
            id="graffiti", name="Graffiti", defaults={Network.ALL: ""}, max_length=16
        )
        assert param.parse("x" * 16) == "x" * 16
        with pytest.raises(ConstraintViolationError):
            param.parse("x" * 17)

    def test_string_regex_applies_to_non_blank_values(self) -> None:
        """A pattern constrains non-empty values; blank values pass."""
        param = StringParameter(
            id="projectID",
            name="Project ID",
            defaults={Network.ALL: ""},
            regex=r"^[0-9a-f]{4}$",
        )
        assert param.parse("ab12") == "ab12"
        assert param.parse("") == ""
        with pytest.raises(ConstraintViolationError):
            param.parse("xyz")

    def test_choice_parses_option_values(self) -> None:
        """A choice parses to the matching enum member."""
        assert make_mode().parse("external") is Mode.EXTERNAL

    def test_choice_rejects_unknown_option(self) -> None:
        """A value outside the options is a constraint violation."""
        with pytest.raises(ConstraintViolationError):
            make_mode().parse("remote")

    def test_non_string_input_is_a_conversion_error(self) -> None:
        """Only strings are parsed."""
        with pytest.raises(TypeConversionError):
            make_port().parse(8545)  # type: ignore[arg-type]


class TestAssignment:
    """Direct assignment is validated like parsing."""

    def test_wrong_type_is_rejected(self) -> None:
        """A string cannot be stored in a port."""
        port = make_port()
        with pytest.raises(pydantic.ValidationError):
            port.value = "8545"
        assert port.value == 8545

    def test_constraint_violation_is_rejected(self) -> None:
        """Assignment enforces the same constraints as parsing."""
        param = StringParameter(
            id="graffiti", name="Graffiti", defaults={Network.ALL: ""}, max_length=4
        )
        with pytest.raises(pydantic.ValidationError):
            param.value = "too long"
        assert param.value == ""

    def test_choice_assignment_outside_options(self) -> None:
        """A choice only stores listed options."""
        param = ChoiceParameter[Mode](
            id="mode",
            name="Mode",
            defaults={Network.ALL: Mode.LOCAL},
            options=[ParameterOption(name="Local", value=Mode.LOCAL)],
        )
        with pytest.raises(pydantic.ValidationError):
            param.value = Mode.EXTERNAL

    def test_set_text(self) -> None:
        """set_text parses then stores."""
        port = make_port()
        port.set_text("30303")
        assert port.value == Uint16(30303)


class TestDocumentsAndEnvironment:
    """Reading and writing document sections and environment maps."""

    def test_serialize_into(self) -> None:
        """The canonical string form is written under the parameter id."""
        values: dict[str, str] = {}
        make_port(9000).serialize_into(values)
        assert values == {"httpPort": "9000"}

    def test_parsed_value_uses_document_entry(self) -> None:
        """A present entry is parsed."""
        assert make_port().parsed_value({"httpPort": "1234"}, Network.MAINNET) == 1234

    def test_parsed_value_falls_back_to_network_default(self) -> None:
        """A missing entry or missing section yields the network's default."""
        gateway = make_gateway()
        assert gateway.parsed_value({}, Network.PRATER) == "prater-gateway"
        assert gateway.parsed_value(None, Network.MAINNET) == "mainnet-gateway"

    def test_deserialize_from(self) -> None:
        """deserialize_from stores the parsed value."""
        gateway = make_gateway()
        gateway.deserialize_from({"gatewayID": "custom"}, Network.MAINNET)
        assert gateway.value == "custom"

    def test_add_to_environment_exports_every_name(self) -> None:
        """Each env var name receives the same string."""
        env: dict[str, str] = {}
        make_port(8000).add_to_environment(env)
        assert env == {"EC_HTTP_PORT": "8000", "HTTP_PORT": "8000"}

    def test_parameter_without_env_vars_exports_nothing(self) -> None:
        """No names, no entries."""
        env: dict[str, str] = {}
        make_gateway().add_to_environment(env)
        assert env == {}


@given(st.integers(min_value=0, max_value=65535))
def test_port_text_parses_back(port: int) -> None:
    """Every port survives its string form."""
    param = make_port()
    param.value = Uint16(port)
    assert param.parse(param.text) == port


@given(st.floats(allow_nan=False, allow_infinity=False))
def test_float_text_parses_back(value: float) -> None:
    """Every finite float survives its string form exactly."""
    param = FloatParameter(id="f", name="F", defaults={Network.ALL: 0.0})
    param.value = value
    assert param.parse(param.text) == value

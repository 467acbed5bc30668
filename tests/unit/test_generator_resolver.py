"""Unit tests for IdentifierGeneratorResolver."""

from __future__ import annotations

import pytest
from entities import CounterGenerator

from row_meta.core.enums import GeneratorType
from row_meta.core.exceptions import (
    CustomGeneratorClassNotFoundError,
    GeneratorNotImplementedError,
    MissingCustomGeneratorClassError,
    UnknownGeneratorTypeError,
)
from row_meta.core.reflection import RuntimeReflectionService, class_name_of
from row_meta.mapping.generator import (
    IdentifierGeneratorResolver,
    default_sequence_name,
    resolve_platform_generator_type,
)
from row_meta.mapping.property import FieldMetadata, ValueGeneratorMetadata
from row_meta.platforms.mysql import MysqlPlatform
from row_meta.platforms.oracle import OraclePlatform
from row_meta.platforms.postgresql import PostgresqlPlatform
from row_meta.platforms.sqlite import SqlitePlatform


def _field(
    generator_type: GeneratorType, definition: dict | None = None, **kwargs
) -> FieldMetadata:
    return FieldMetadata(
        "id",
        primary_key=True,
        column_name=kwargs.pop("column_name", "id"),
        value_generator=ValueGeneratorMetadata(generator_type, definition or {}),
        **kwargs,
    )


def _resolver(platform=None) -> IdentifierGeneratorResolver:
    return IdentifierGeneratorResolver(platform or PostgresqlPlatform(), RuntimeReflectionService())


class TestPlatformGeneratorType:
    @pytest.mark.parametrize(
        ("platform", "expected"),
        [
            (PostgresqlPlatform(), GeneratorType.SEQUENCE),
            (OraclePlatform(), GeneratorType.SEQUENCE),
            (MysqlPlatform(), GeneratorType.IDENTITY),
            (SqlitePlatform(), GeneratorType.IDENTITY),
        ],
    )
    def test_auto_resolution(self, platform, expected: GeneratorType) -> None:
        assert resolve_platform_generator_type(platform) is expected

    def test_platform_without_preferences_falls_back_to_table(self) -> None:
        class BarePlatform(MysqlPlatform):
            def prefers_identity_columns(self) -> bool:
                return False

        assert resolve_platform_generator_type(BarePlatform()) is GeneratorType.TABLE


class TestSequenceNames:
    def test_default_name(self) -> None:
        assert default_sequence_name(PostgresqlPlatform(), "users", "id") == "users_id_seq"

    def test_oracle_truncates(self) -> None:
        name = default_sequence_name(OraclePlatform(), "customer_loyalty_programme", "id")
        assert len(name) == 30
        assert name == "customer_loyalty_programme_id_"

    def test_sqlite_without_schema(self) -> None:
        assert default_sequence_name(SqlitePlatform(), "users", "id") == "users_id_seq"


class TestIdentifierGeneratorResolver:
    def test_auto_synthesizes_sequence(self) -> None:
        prop = _field(GeneratorType.AUTO)
        _resolver().complete(prop, "users")
        assert prop.value_generator == ValueGeneratorMetadata(
            GeneratorType.SEQUENCE, {"sequenceName": "users_id_seq", "allocationSize": 1}
        )

    def test_field_table_wins_over_class_table(self) -> None:
        prop = _field(GeneratorType.SEQUENCE, table_name="accounts")
        _resolver().complete(prop, "users")
        assert prop.value_generator.definition["sequenceName"] == "accounts_id_seq"

    def test_explicit_sequence_definition_kept(self) -> None:
        definition = {"sequenceName": "custom_seq", "allocationSize": 50}
        prop = _field(GeneratorType.SEQUENCE, definition)
        _resolver().complete(prop, "users")
        assert prop.value_generator.definition == definition

    def test_partial_sequence_definition_gets_name(self) -> None:
        prop = _field(GeneratorType.SEQUENCE, {"allocationSize": 10})
        _resolver().complete(prop, "users")
        assert prop.value_generator.definition == {
            "sequenceName": "users_id_seq",
            "allocationSize": 10,
        }

    def test_auto_with_partial_definition_gets_name(self) -> None:
        prop = _field(GeneratorType.AUTO, {"allocationSize": 5, "initialValue": 100})
        _resolver().complete(prop, "users")
        assert prop.value_generator == ValueGeneratorMetadata(
            GeneratorType.SEQUENCE,
            {"sequenceName": "users_id_seq", "allocationSize": 5, "initialValue": 100},
        )

    def test_declared_generator_kept(self) -> None:
        prop = _field(GeneratorType.AUTO)
        _resolver().complete(prop, "users")
        assert prop.declared_value_generator == ValueGeneratorMetadata(GeneratorType.AUTO)

    def test_identity_on_postgresql_becomes_sequence(self) -> None:
        prop = _field(GeneratorType.IDENTITY)
        _resolver().complete(prop, "users")
        assert prop.value_generator.type is GeneratorType.SEQUENCE

    def test_identity_on_mysql_stays_identity(self) -> None:
        prop = _field(GeneratorType.IDENTITY)
        _resolver(MysqlPlatform()).complete(prop, "users")
        assert prop.value_generator == ValueGeneratorMetadata(GeneratorType.IDENTITY)

    def test_resolving_twice_is_stable(self) -> None:
        prop = _field(GeneratorType.AUTO)
        resolver = _resolver()
        resolver.complete(prop, "users")
        first = prop.value_generator
        resolver.complete(prop, "users")
        assert prop.value_generator == first

    @pytest.mark.parametrize("generator_type", [GeneratorType.NONE, GeneratorType.UUID])
    def test_pass_through_types(self, generator_type: GeneratorType) -> None:
        prop = _field(generator_type)
        _resolver().complete(prop, "users")
        assert prop.value_generator == ValueGeneratorMetadata(generator_type)

    def test_table_not_implemented(self) -> None:
        with pytest.raises(GeneratorNotImplementedError, match="^TableGenerator not yet"):
            _resolver().complete(_field(GeneratorType.TABLE), "users")

    def test_custom_without_class(self) -> None:
        with pytest.raises(MissingCustomGeneratorClassError, match="no class has been defined"):
            _resolver().complete(_field(GeneratorType.CUSTOM), "users")

    def test_errors_name_the_class(self) -> None:
        with pytest.raises(MissingCustomGeneratorClassError, match="in 'entities.User'") as excinfo:
            _resolver().complete(_field(GeneratorType.CUSTOM), "users", "entities.User")
        assert excinfo.value.class_name == "entities.User"

    def test_custom_with_unknown_class(self) -> None:
        prop = _field(GeneratorType.CUSTOM, {"class": "entities.NoSuchGenerator"})
        with pytest.raises(CustomGeneratorClassNotFoundError, match="NoSuchGenerator"):
            _resolver().complete(prop, "users")

    def test_custom_with_known_class(self) -> None:
        definition = {"class": class_name_of(CounterGenerator)}
        prop = _field(GeneratorType.CUSTOM, definition)
        _resolver().complete(prop, "users")
        assert prop.value_generator == ValueGeneratorMetadata(GeneratorType.CUSTOM, definition)

    def test_unknown_type(self) -> None:
        generator = ValueGeneratorMetadata("HILO")  # type: ignore[arg-type]
        prop = FieldMetadata("id", value_generator=generator)
        with pytest.raises(UnknownGeneratorTypeError, match="HILO"):
            _resolver().complete(prop, "users")

    def test_field_without_generator_untouched(self) -> None:
        prop = FieldMetadata("name")
        _resolver().complete(prop, "users")
        assert prop.value_generator is None

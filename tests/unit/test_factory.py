"""Unit tests for ClassMetadataFactory."""

from __future__ import annotations

import logging

import pytest
from entities import (
    Animal,
    AuditListener,
    Car,
    Cat,
    Circle,
    Dog,
    Employee,
    Legacy,
    Manager,
    Phone,
    Shape,
    Square,
    Truck,
    User,
    Vehicle,
)
from fakes import DictCache, InMemoryDriver

from row_meta.core.configuration import Configuration
from row_meta.core.enums import CacheUsage, GeneratorType, InheritanceType
from row_meta.core.events import EventManager, Events
from row_meta.core.exceptions import (
    CircularLoadError,
    ClassNotFoundError,
    ClassNotInDiscriminatorMapError,
    ConfigurationError,
    DuplicateDiscriminatorEntryError,
    FactoryNotConfiguredError,
    GeneratorNotImplementedError,
    MissingDiscriminatorColumnError,
    MissingIdentifierError,
    NoInheritanceOnMappedSuperclassError,
    TargetEntityNotFoundError,
)
from row_meta.core.reflection import StaticReflectionService, class_name_of
from row_meta.mapping.factory import ClassMetadataFactory
from row_meta.mapping.metadata import ClassMetadata
from row_meta.mapping.property import (
    CacheMetadata,
    DiscriminatorColumnMetadata,
    FieldMetadata,
    ManyToOneAssociationMetadata,
    TableMetadata,
    ValueGeneratorMetadata,
)
from row_meta.sequencing.generators import IdentityGenerator, SequenceGenerator
from row_meta.sequencing.plan import NoopValueGenerationPlan, SingleValueGenerationPlan

USER = class_name_of(User)
VEHICLE = class_name_of(Vehicle)
CAR = class_name_of(Car)
TRUCK = class_name_of(Truck)


def _id(metadata: ClassMetadata, generator: GeneratorType | None = GeneratorType.AUTO) -> None:
    value_generator = ValueGeneratorMetadata(generator) if generator is not None else None
    metadata.add_property(
        FieldMetadata("id", primary_key=True, type_name="integer", value_generator=value_generator)
    )


def map_user(metadata: ClassMetadata) -> None:
    metadata.set_table(TableMetadata("users"))
    _id(metadata)
    metadata.add_property(FieldMetadata("name"))


def map_vehicle(metadata: ClassMetadata) -> None:
    metadata.set_table(TableMetadata("vehicle"))
    metadata.set_inheritance_type(InheritanceType.SINGLE_TABLE)
    metadata.set_discriminator_column(DiscriminatorColumnMetadata())
    _id(metadata)


def map_nothing(metadata: ClassMetadata) -> None:
    pass


@pytest.fixture
def vehicles(driver: InMemoryDriver) -> InMemoryDriver:
    driver.register(Vehicle, map_vehicle)
    driver.register(Car, map_nothing)
    driver.register(Truck, map_nothing)
    return driver


class TestWiring:
    def test_unwired_factory_raises(self) -> None:
        with pytest.raises(FactoryNotConfiguredError, match="set_entity_manager"):
            ClassMetadataFactory().get_metadata_for(USER)

    def test_missing_driver_raises(self) -> None:
        factory = ClassMetadataFactory.from_config(Configuration())
        with pytest.raises(ConfigurationError, match="metadata driver"):
            factory.get_metadata_for(USER)

    def test_platform_resolved_once(self, make_factory) -> None:
        factory = make_factory(platform="postgresql")
        assert factory.get_target_platform() is factory.get_target_platform()
        assert factory.get_target_platform().name == "postgresql"

    def test_set_entity_manager(self, driver: InMemoryDriver) -> None:
        class FakeEntityManager:
            def __init__(self) -> None:
                self.configuration = Configuration(platform="mysql", metadata_driver=driver)
                self.event_manager = EventManager()
                self.platform_calls = 0

            def get_database_platform(self):
                from row_meta.platforms.mysql import MysqlPlatform

                self.platform_calls += 1
                return MysqlPlatform()

        driver.register(User, map_user)
        em = FakeEntityManager()
        factory = ClassMetadataFactory()
        factory.set_entity_manager(em)
        factory.get_metadata_for(USER)
        factory.get_target_platform()
        assert em.platform_calls == 1


class TestIdentifierGeneration:
    def test_auto_on_postgresql_becomes_sequence(self, driver, make_factory) -> None:
        driver.register(User, map_user)
        metadata = make_factory(platform="postgresql").get_metadata_for(User)

        generator = metadata.get_property("id").value_generator
        assert generator.type is GeneratorType.SEQUENCE
        assert generator.definition == {"sequenceName": "users_id_seq", "allocationSize": 1}

    def test_postgresql_plan_uses_sequence(self, driver, make_factory) -> None:
        driver.register(User, map_user)
        metadata = make_factory(platform="postgresql").get_metadata_for(User)

        plan = metadata.value_generation_plan
        assert isinstance(plan, SingleValueGenerationPlan)
        assert isinstance(plan.executor.generator, SequenceGenerator)
        assert plan.executor.generator.sequence_name == "users_id_seq"
        assert plan.contains_deferred() is False

    def test_auto_on_sqlite_becomes_identity(self, driver, factory) -> None:
        driver.register(User, map_user)
        metadata = factory.get_metadata_for(User)

        assert metadata.get_property("id").value_generator.type is GeneratorType.IDENTITY
        plan = metadata.value_generation_plan
        assert isinstance(plan.executor.generator, IdentityGenerator)
        assert plan.contains_deferred() is True

    def test_table_strategy_fails_load(self, driver, factory) -> None:
        driver.register(User, lambda m: _id(m, GeneratorType.TABLE))
        with pytest.raises(GeneratorNotImplementedError, match="TableGenerator not yet") as excinfo:
            factory.get_metadata_for(User)
        assert excinfo.value.class_name == USER
        assert f"in '{USER}'" in str(excinfo.value)
        assert factory.has_metadata_for(User) is False

    def test_no_generator_gives_noop_plan(self, driver, factory) -> None:
        driver.register(User, lambda m: _id(m, None))
        metadata = factory.get_metadata_for(User)
        assert isinstance(metadata.value_generation_plan, NoopValueGenerationPlan)


class TestCaching:
    def test_same_instance_returned(self, driver, factory) -> None:
        driver.register(User, map_user)
        first = factory.get_metadata_for(User)
        assert factory.get_metadata_for(USER) is first
        assert driver.loads == [USER]

    def test_has_metadata_for(self, driver, factory) -> None:
        driver.register(User, map_user)
        assert factory.has_metadata_for(User) is False
        factory.get_metadata_for(User)
        assert factory.has_metadata_for(User) is True

    def test_set_metadata_for(self, factory) -> None:
        metadata = ClassMetadata(USER)
        factory.set_metadata_for(User, metadata)
        assert factory.get_metadata_for(USER) is metadata

    def test_get_all_metadata(self, vehicles, factory) -> None:
        names = [metadata.class_name for metadata in factory.get_all_metadata()]
        assert names == [VEHICLE, CAR, TRUCK]
        assert set(factory.get_loaded_metadata()) == {VEHICLE, CAR, TRUCK}

    def test_is_transient(self, driver, factory) -> None:
        driver.register(User, map_user)
        assert factory.is_transient(User) is False
        assert factory.is_transient(Phone) is True

    def test_metadata_cache_is_filled_and_read(self, driver, make_factory) -> None:
        cache = DictCache()
        driver.register(User, map_user)
        make_factory(metadata_cache=cache).get_metadata_for(User)
        assert set(cache.data) == {USER + "$CLASSMETADATA"}

        fresh = make_factory(metadata_cache=cache)
        metadata = fresh.get_metadata_for(User)
        assert driver.loads == [USER]
        assert metadata.reflection_class is User

    def test_ancestors_are_loaded_first(self, vehicles, factory) -> None:
        car = factory.get_metadata_for(Car)
        assert vehicles.loads == [VEHICLE, CAR]
        assert car.parent is factory.get_metadata_for(Vehicle)
        assert car.root_class_name == VEHICLE


class TestCircularLoading:
    def test_reentrant_request_raises(self, driver, factory) -> None:
        def map_user_loading_itself(metadata: ClassMetadata) -> None:
            map_user(metadata)
            factory.get_metadata_for(USER)

        driver.register(User, map_user_loading_itself)
        with pytest.raises(CircularLoadError, match="already being loaded"):
            factory.get_metadata_for(User)
        assert factory.has_metadata_for(User) is False

    def test_failed_load_is_retried(self, driver, factory) -> None:
        attempts: list[int] = []

        def flaky(metadata: ClassMetadata) -> None:
            attempts.append(1)
            if len(attempts) == 1:
                raise ValueError("boom")
            map_user(metadata)

        driver.register(User, flaky)
        with pytest.raises(ValueError, match="boom"):
            factory.get_metadata_for(User)
        assert factory.get_metadata_for(User).class_name == USER


class TestDiscriminatorMap:
    def test_default_map_is_generated(self, vehicles, factory) -> None:
        metadata = factory.get_metadata_for(Vehicle)
        assert metadata.discriminator_map == {"vehicle": VEHICLE, "car": CAR, "truck": TRUCK}

    def test_subclass_value_resolved(self, vehicles, factory) -> None:
        assert factory.get_metadata_for(Car).discriminator_value == "car"
        assert factory.get_metadata_for(Truck).discriminator_value == "truck"
        assert factory.get_metadata_for(Vehicle).discriminator_value == "vehicle"

    def test_subclass_inherits_inheritance_settings(self, vehicles, factory) -> None:
        car = factory.get_metadata_for(Car)
        assert car.inheritance_type is InheritanceType.SINGLE_TABLE
        assert car.discriminator_column.column_name == "dtype"
        assert car.get_table_name() == "vehicle"
        assert car.identifier == ["id"]

    def test_resolution_is_idempotent(self, vehicles, factory) -> None:
        car = factory.get_metadata_for(Car)
        factory.resolve_discriminator_value(car)
        assert car.discriminator_value == "car"

    def test_duplicate_short_names_fail(self, driver, factory) -> None:
        def map_shape(metadata: ClassMetadata) -> None:
            map_vehicle(metadata)

        driver.register(Shape, map_shape)
        driver.register(Circle, map_nothing)
        driver.register(Square, map_nothing)
        driver.register(Legacy.Circle, map_nothing)

        with pytest.raises(DuplicateDiscriminatorEntryError, match="circle") as excinfo:
            factory.get_metadata_for(Square)
        assert excinfo.value.conflicts == {
            "circle": [class_name_of(Circle), class_name_of(Legacy.Circle)]
        }
        assert factory.has_metadata_for(Shape) is False

    def test_abstract_root_has_no_value(self, driver, factory) -> None:
        driver.register(Shape, map_vehicle)
        driver.register(Circle, map_nothing)
        assert factory.get_metadata_for(Shape).discriminator_value is None
        assert factory.get_metadata_for(Circle).discriminator_value == "circle"

    def test_class_outside_map_fails(self, driver, factory) -> None:
        def map_animal(metadata: ClassMetadata) -> None:
            map_vehicle(metadata)
            metadata.set_discriminator_map(
                {"animal": class_name_of(Animal), "cat": class_name_of(Cat)}
            )

        driver.register(Animal, map_animal)
        driver.register(Cat, map_nothing)
        driver.register(Dog, map_nothing)

        with pytest.raises(ClassNotInDiscriminatorMapError, match="Dog"):
            factory.get_metadata_for(Dog)
        assert factory.has_metadata_for(Dog) is False
        assert factory.has_metadata_for(Animal) is False

    def test_alias_entry_resolves_through_factory(self, driver, factory, event_manager) -> None:
        def map_animal(metadata: ClassMetadata) -> None:
            map_vehicle(metadata)
            metadata.set_discriminator_map({"animal": class_name_of(Animal), "dog": "alias.Dog"})

        def resolve_alias(args) -> None:
            if args.class_name == "alias.Dog":
                args.found_metadata = factory.get_metadata_for(Dog)

        event_manager.add_listener(Events.ON_CLASS_METADATA_NOT_FOUND, resolve_alias)
        driver.register(Animal, map_animal)
        driver.register(Dog, map_nothing)

        assert factory.get_metadata_for(Dog).discriminator_value == "dog"


class TestMappedSuperclass:
    @pytest.fixture
    def staff(self, driver: InMemoryDriver) -> InMemoryDriver:
        def map_employee(metadata: ClassMetadata) -> None:
            metadata.is_mapped_superclass = True
            metadata.set_table(TableMetadata("employee"))
            metadata.set_cache(CacheMetadata(CacheUsage.READ_WRITE, "staff"))
            metadata.add_entity_listener(
                Events.PRE_PERSIST, class_name_of(AuditListener), "pre_persist"
            )
            _id(metadata)
            metadata.add_property(FieldMetadata("salary", type_name="integer"))

        def map_manager(metadata: ClassMetadata) -> None:
            metadata.set_table(TableMetadata("manager"))
            metadata.add_property(FieldMetadata("bonus", type_name="integer"))

        driver.register(Employee, map_employee)
        driver.register(Manager, map_manager)
        return driver

    def test_field_tables_follow_declaring_class(self, staff, factory) -> None:
        manager = factory.get_metadata_for(Manager)
        assert manager.get_property("salary").table_name == "employee"
        assert manager.get_property("bonus").table_name == "manager"

    def test_parent_metadata_is_untouched(self, staff, factory) -> None:
        factory.get_metadata_for(Manager)
        employee = factory.get_metadata_for(Employee)
        assert employee.has_property("bonus") is False
        assert employee.get_property("salary").table_name is None

    def test_cache_is_copied(self, staff, factory) -> None:
        manager = factory.get_metadata_for(Manager)
        employee = factory.get_metadata_for(Employee)
        assert manager.cache == employee.cache
        assert manager.cache is not employee.cache

    def test_entity_listeners_inherited(self, staff, factory) -> None:
        manager = factory.get_metadata_for(Manager)
        assert manager.has_entity_listener(
            Events.PRE_PERSIST, class_name_of(AuditListener), "pre_persist"
        )

    def test_identifier_generated_on_entity(self, staff, factory) -> None:
        manager = factory.get_metadata_for(Manager)
        assert manager.identifier == ["id"]
        assert isinstance(manager.value_generation_plan, SingleValueGenerationPlan)

    def test_inherited_identifier_sequence_follows_entity(self, staff, make_factory) -> None:
        factory = make_factory(platform="postgresql")
        manager = factory.get_metadata_for(Manager)
        employee = factory.get_metadata_for(Employee)

        assert manager.get_property("id").value_generator == ValueGeneratorMetadata(
            GeneratorType.SEQUENCE, {"sequenceName": "manager_id_seq", "allocationSize": 1}
        )
        assert manager.value_generation_plan.executor.generator.sequence_name == "manager_id_seq"
        assert employee.get_property("id").value_generator.definition["sequenceName"] == (
            "employee_id_seq"
        )

    def test_table_less_superclass_sequence_not_shared(self, driver, make_factory) -> None:
        def map_employee(metadata: ClassMetadata) -> None:
            metadata.is_mapped_superclass = True
            _id(metadata)

        driver.register(Employee, map_employee)
        driver.register(Manager, lambda metadata: metadata.set_table(TableMetadata("manager")))

        manager = make_factory(platform="postgresql").get_metadata_for(Manager)
        definition = manager.get_property("id").value_generator.definition
        assert definition["sequenceName"] == "manager_id_seq"

    def test_mapped_superclass_root_rejects_inheritance(self, driver, factory) -> None:
        def map_employee(metadata: ClassMetadata) -> None:
            metadata.is_mapped_superclass = True
            metadata.set_discriminator_map({"employee": class_name_of(Employee)})

        driver.register(Employee, map_employee)
        with pytest.raises(NoInheritanceOnMappedSuperclassError):
            factory.get_metadata_for(Employee)


class TestRuntimeValidation:
    def test_missing_identifier(self, driver, factory) -> None:
        driver.register(User, lambda m: m.add_property(FieldMetadata("name")))
        with pytest.raises(MissingIdentifierError, match="No identifier/primary key"):
            factory.get_metadata_for(User)

    def test_missing_discriminator_column(self, driver, factory) -> None:
        def map_root(metadata: ClassMetadata) -> None:
            metadata.set_inheritance_type(InheritanceType.JOINED)
            _id(metadata)

        driver.register(Vehicle, map_root)
        with pytest.raises(MissingDiscriminatorColumnError):
            factory.get_metadata_for(Vehicle)

    def test_unknown_association_target(self, driver, factory) -> None:
        def map_phone(metadata: ClassMetadata) -> None:
            metadata.add_property(FieldMetadata("number", primary_key=True))
            metadata.add_property(
                ManyToOneAssociationMetadata("user", target_entity="entities.Nobody")
            )

        driver.register(Phone, map_phone)
        with pytest.raises(TargetEntityNotFoundError, match="entities.Nobody"):
            factory.get_metadata_for(Phone)

    def test_static_metadata_skips_validation(self, driver, make_factory) -> None:
        driver.register("app.Static", lambda m: m.add_property(FieldMetadata("name")))
        factory = make_factory(reflection_service=StaticReflectionService())
        metadata = factory.get_metadata_for("app.Static")
        assert metadata.reflection_class is None
        assert metadata.identifier == []


class TestEvents:
    def test_load_class_metadata_dispatched_once_per_class(
        self, vehicles, factory, event_manager
    ) -> None:
        seen: list[str] = []
        event_manager.add_listener(
            Events.LOAD_CLASS_METADATA, lambda args: seen.append(args.class_metadata.class_name)
        )
        factory.get_metadata_for(Car)
        factory.get_metadata_for(Car)
        assert seen == [VEHICLE, CAR]

    def test_listener_changes_flow_into_plan(self, driver, factory, event_manager) -> None:
        def add_token(args) -> None:
            args.class_metadata.add_property(
                FieldMetadata(
                    "token",
                    value_generator=ValueGeneratorMetadata(GeneratorType.UUID),
                )
            )

        event_manager.add_listener(Events.LOAD_CLASS_METADATA, add_token)
        driver.register(User, map_user)
        plan = factory.get_metadata_for(User).value_generation_plan
        assert [executor.property_name for executor in plan.executors] == ["id", "token"]

    def test_not_found_without_listener_raises(self, factory) -> None:
        with pytest.raises(ClassNotFoundError, match="entities.Missing"):
            factory.get_metadata_for("entities.Missing")

    def test_not_found_listener_supplies_metadata(
        self, factory, event_manager, caplog: pytest.LogCaptureFixture
    ) -> None:
        replacement = ClassMetadata("entities.Missing")

        def supply(args) -> None:
            args.found_metadata = replacement

        event_manager.add_listener(Events.ON_CLASS_METADATA_NOT_FOUND, supply)
        with caplog.at_level(logging.WARNING, logger="row_meta.mapping.base"):
            assert factory.get_metadata_for("entities.Missing") is replacement
        assert "not-found listener" in caplog.text

# =============================================================================
# tests/unit/test_builder.py
# Unit Tests for SchemaBuilder
# =============================================================================

import pytest


@pytest.fixture
def builder():
    from capture_core.schema import SchemaBuilder, default_schema

    return SchemaBuilder(default_schema().fields[:3], clock=lambda: 1717232400.5)


class TestSchemaBuilderAdd:
    """Test adding fields"""

    def test_generated_name_uses_epoch_ms(self, builder):
        field = builder.add_field("Baptism Date", "date")

        assert field.name == "field_1717232400500"
        assert builder.fields[-1] is field

    def test_generated_names_do_not_collide(self, builder):
        first = builder.add_field("A")
        second = builder.add_field("B")

        assert first.name != second.name

    def test_empty_label_rejected(self, builder):
        from capture_core.errors import SchemaFormatError

        with pytest.raises(SchemaFormatError) as exc_info:
            builder.add_field("   ")
        assert exc_info.value.message == "Label is required"

    def test_comma_separated_options(self, builder):
        field = builder.add_field("Ministry", "select", options="Choir, Youth ,,Prayer")
        assert field.options == ("Choir", "Youth", "Prayer")

    def test_options_dropped_for_non_select(self, builder):
        field = builder.add_field("Notes", "textarea", options="a,b")
        assert field.options == ()

    def test_duplicate_explicit_name_rejected(self, builder):
        from capture_core.errors import SchemaFormatError

        with pytest.raises(SchemaFormatError):
            builder.add_field("Again", name="firstName")

    def test_unknown_type_rejected(self, builder):
        from capture_core.errors import SchemaFormatError

        with pytest.raises(SchemaFormatError) as exc_info:
            builder.add_field("Photo", "image")
        assert exc_info.value.message == "Unknown field type: 'image'"
        assert len(builder.fields) == 3


class TestSchemaBuilderEdit:
    """Test editing, moving and removing"""

    def test_update_keeps_position(self, builder):
        builder.update_field("lastName", label="Surname", required=False)

        assert builder.fields[1].label == "Surname"
        assert builder.fields[1].required is False

    def test_update_to_select_splits_options(self, builder):
        updated = builder.update_field("lastName", type="select", options="A,B")
        assert updated.options == ("A", "B")

    def test_update_unknown_field(self, builder):
        with pytest.raises(KeyError):
            builder.update_field("missing", label="X")

    def test_update_to_unknown_type_rejected(self, builder):
        from capture_core.errors import SchemaFormatError

        with pytest.raises(SchemaFormatError):
            builder.update_field("lastName", type="image")
        assert builder.fields[1].type.value == "text"

    def test_move_up_and_down(self, builder):
        builder.move_field(1, "up")
        assert [f.name for f in builder.fields] == ["lastName", "firstName", "dob"]

        builder.move_field(1, "down")
        assert [f.name for f in builder.fields] == ["lastName", "dob", "firstName"]

    def test_move_at_edges_is_noop(self, builder):
        before = [f.name for f in builder.fields]

        builder.move_field(0, "up")
        builder.move_field(2, "down")

        assert [f.name for f in builder.fields] == before

    def test_out_of_range_index_is_noop(self, builder):
        before = [f.name for f in builder.fields]

        builder.move_field(-1, "down")
        builder.move_field(-1, "up")
        builder.move_field(3, "up")

        assert [f.name for f in builder.fields] == before

    def test_remove(self, builder):
        builder.remove_field("dob")
        assert [f.name for f in builder.fields] == ["firstName", "lastName"]

    def test_elements_are_wire_shaped(self, builder):
        from capture_core.schema import Schema

        elements = builder.elements()
        parsed = Schema.from_dict({"version": 9, "elements": elements})

        assert [f.name for f in parsed] == ["firstName", "lastName", "dob"]

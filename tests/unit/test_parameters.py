"""
Unit tests for the parameter publisher.

Each publish must produce exactly one SSM parameter and (for outputs) one
CloudFormation output, at a deterministic path, in call order.
"""
import aws_cdk as cdk
import pytest
from aws_cdk.assertions import Template

from acorn_pups_db.errors import PublicationError
from acorn_pups_db.handles import TableHandle
from acorn_pups_db.parameters import OutputSpec, ParameterPublisher


@pytest.fixture
def stack(app):
    return cdk.Stack(app, "TestStack")


@pytest.fixture
def publisher(stack):
    return ParameterPublisher(stack, environment="test", stack_name="test-stack")


def test_publish_creates_output_and_parameter(stack, publisher):
    publisher.publish("TestOutput", "test-value", "Test description", "test-export-name")

    template = Template.from_stack(stack)
    template.has_output("TestOutput", {
        "Value": "test-value",
        "Description": "Test description",
        "Export": {"Name": "test-export-name"},
    })
    template.has_resource_properties("AWS::SSM::Parameter", {
        "Name": "/acorn-pups/test/cfn-outputs/test-stack/test-output",
        "Value": "test-value",
        "Description": "[test-stack] Test description",
        "Type": "String",
        "Tier": "Standard",
        "AllowedPattern": ".*",
    })


def test_publish_with_custom_path(stack, publisher):
    published = publisher.publish(
        "CustomPathOutput", "custom-value", "Custom description",
        parameter_path="/custom/path/to/parameter",
    )

    assert published.parameter_path == "/custom/path/to/parameter"
    Template.from_stack(stack).has_resource_properties("AWS::SSM::Parameter", {
        "Name": "/custom/path/to/parameter",
        "Value": "custom-value",
        "Description": "[test-stack] Custom description",
    })


def test_pascal_case_output_id_becomes_kebab_path(stack, publisher):
    publisher.publish("SomeVeryLongOutputName", "value", "Description")

    Template.from_stack(stack).has_resource_properties("AWS::SSM::Parameter", {
        "Name": "/acorn-pups/test/cfn-outputs/test-stack/some-very-long-output-name",
        "Value": "value",
    })


def test_derived_path_for_users_table_name(app):
    publisher = ParameterPublisher(cdk.Stack(app, "Demo"), environment="test", stack_name="demo-stack")
    published = publisher.publish("UsersTableName", "acorn-pups-users-test", "Users table")
    assert published.parameter_path == "/acorn-pups/test/cfn-outputs/demo-stack/users-table-name"


def test_parameter_path_lookup(publisher):
    assert publisher.parameter_path("TestOutputName") == "/acorn-pups/test/cfn-outputs/test-stack/test-output-name"


def test_output_without_export_name(stack, publisher):
    publisher.publish("NoExport", "v", "d")
    outputs = Template.from_stack(stack).find_outputs("NoExport")
    assert "Export" not in outputs["NoExport"]


def test_publish_many_preserves_order(stack, publisher):
    published = publisher.publish_many([
        OutputSpec(output_id="Output1", value="value1", description="Description 1", export_name="export1"),
        OutputSpec(output_id="Output2", value="value2", description="Description 2", parameter_path="/custom/path2"),
    ])

    assert [p.output_id for p in published] == ["Output1", "Output2"]
    template = Template.from_stack(stack)
    template.resource_count_is("AWS::SSM::Parameter", 2)
    template.has_output("Output1", {"Value": "value1", "Export": {"Name": "export1"}})
    template.has_output("Output2", {"Value": "value2", "Description": "Description 2"})
    template.has_resource_properties("AWS::SSM::Parameter", {"Name": "/custom/path2", "Value": "value2"})


def test_batch_of_n_yields_n_entries_in_order(stack, publisher):
    ids = [f"Output{name}" for name in ("Zulu", "Alpha", "Mike", "Bravo", "Echo")]
    published = publisher.publish_many(
        OutputSpec(output_id=i, value=f"value-{i}", description=i) for i in ids
    )

    assert [p.output_id for p in published] == ids
    assert [p.output_id for p in publisher.published] == ids
    template = Template.from_stack(stack)
    template.resource_count_is("AWS::SSM::Parameter", len(ids))
    assert set(template.find_outputs("*")) == set(ids)


def test_create_parameter_has_no_output(stack, publisher):
    published = publisher.create_parameter("StandaloneParam", "param-value", "Standalone parameter description")

    assert published.output is None
    template = Template.from_stack(stack)
    template.has_resource_properties("AWS::SSM::Parameter", {
        "Name": "/acorn-pups/test/cfn-outputs/test-stack/standalone-param",
        "Value": "param-value",
        "Description": "[test-stack] Standalone parameter description",
    })
    assert template.find_outputs("*") == {}


def test_duplicate_path_is_a_caller_error(publisher):
    publisher.publish("First", "a", "first", parameter_path="/shared/path")
    with pytest.raises(PublicationError) as exc:
        publisher.publish("Second", "b", "second", parameter_path="/shared/path")
    assert exc.value.path == "/shared/path"
    assert exc.value.output_id == "Second"


def test_duplicate_output_id_in_batch_is_not_merged(publisher):
    with pytest.raises(PublicationError, match="test-stack/dup"):
        publisher.publish_many([
            OutputSpec(output_id="Dup", value="1", description="one"),
            OutputSpec(output_id="Dup", value="2", description="two"),
        ])
    assert [p.output_id for p in publisher.published] == ["Dup"]


def test_duplicate_output_id_with_different_paths(publisher):
    publisher.publish("Same", "1", "one", parameter_path="/a")
    with pytest.raises(PublicationError, match="output id already used"):
        publisher.publish("Same", "2", "two", parameter_path="/b")


def test_table_handles_publish_name_and_arn(stack, publisher):
    handle = TableHandle(
        entity="device-users",
        display_name="Device Users",
        name="acorn-pups-device-users-test",
        arn="arn:aws:dynamodb:us-east-1:123456789012:table/acorn-pups-device-users-test",
    )
    published = publisher.publish_table_handles([handle])

    assert [p.output_id for p in published] == ["DeviceUsersTableName", "DeviceUsersTableArn"]
    template = Template.from_stack(stack)
    template.has_resource_properties("AWS::SSM::Parameter", {
        "Name": "/acorn-pups/test/dynamodb-tables/device-users/name",
        "Value": "acorn-pups-device-users-test",
        "Description": "[test-stack] Name of the Device Users DynamoDB table",
    })
    template.has_output("DeviceUsersTableArn", {
        "Value": handle.arn,
        "Export": {"Name": "acorn-pups-device-users-table-arn-test"},
    })

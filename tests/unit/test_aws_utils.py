"""Unit tests for AWS helpers and error translation."""

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoRegionError

from ssmhop.core.models import ResolvedTarget, SessionHandle
from ssmhop.providers.aws.errors import handle_aws_errors
from ssmhop.providers.aws.utils import (
    get_name_tag,
    iter_instances,
    make_client_factory,
    region_from_profile,
)
from ssmhop.providers.exceptions import (
    LookupFailed,
    ProviderAPIError,
    ProviderCredentialsError,
)


class TestHandleAwsErrors:
    """Tests for handle_aws_errors."""

    def test_client_error_code_preserved(self) -> None:
        with pytest.raises(LookupFailed) as exc_info:
            with handle_aws_errors(LookupFailed, "DescribeInstances"):
                raise ClientError(
                    {"Error": {"Code": "RequestExpired", "Message": "expired"}},
                    "DescribeInstances",
                )

        assert exc_info.value.error_code == "RequestExpired"
        assert str(exc_info.value) == "DescribeInstances: expired"

    def test_connection_error(self) -> None:
        with pytest.raises(ProviderAPIError) as exc_info:
            with handle_aws_errors():
                raise EndpointConnectionError(endpoint_url="https://ssm")

        assert exc_info.value.error_code == "EndpointConnectionError"

    def test_no_region(self) -> None:
        with pytest.raises(ProviderAPIError) as exc_info:
            with handle_aws_errors():
                raise NoRegionError()

        assert exc_info.value.error_code == "NoRegion"

    def test_other_exceptions_pass_through(self) -> None:
        with pytest.raises(KeyError):
            with handle_aws_errors():
                raise KeyError("x")


class TestProfiles:
    """Tests for profile helpers."""

    def test_unknown_profile_is_credentials_error(self) -> None:
        with pytest.raises(ProviderCredentialsError):
            make_client_factory("no-such-profile")

    def test_default_chain_factory(self) -> None:
        assert callable(make_client_factory(""))

    def test_region_from_unknown_profile(self) -> None:
        assert region_from_profile("no-such-profile") == ""

    def test_region_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("AWS_DEFAULT_REGION", "ap-south-1")
        assert region_from_profile() == "ap-south-1"

    def test_region_from_profile_file(self, tmp_path, monkeypatch) -> None:
        config = tmp_path / "config"
        config.write_text("[profile dev]\nregion = eu-north-1\n")
        monkeypatch.setenv("AWS_CONFIG_FILE", str(config))

        assert region_from_profile("dev") == "eu-north-1"


class TestInstanceHelpers:
    """Tests for instance description helpers."""

    def test_get_name_tag(self) -> None:
        instance = {"Tags": [{"Key": "env", "Value": "prod"}, {"Key": "Name", "Value": "web"}]}
        assert get_name_tag(instance) == "web"

    def test_get_name_tag_missing(self) -> None:
        assert get_name_tag({}) == ""

    def test_iter_instances_flattens_pages(self) -> None:
        pages = [
            {"Reservations": [{"Instances": [{"InstanceId": "i-1"}, {"InstanceId": "i-2"}]}]},
            {"Reservations": []},
            {"Reservations": [{"Instances": [{"InstanceId": "i-3"}]}]},
        ]

        assert [i["InstanceId"] for i in iter_instances(pages)] == ["i-1", "i-2", "i-3"]


class TestModels:
    """Tests for shared data types."""

    def test_resolved_target_requires_fields(self) -> None:
        with pytest.raises(ValueError):
            ResolvedTarget(region="", instance_id="i-1")
        with pytest.raises(ValueError):
            ResolvedTarget(region="eu-west-1", instance_id="")

    def test_session_handle_payload(self) -> None:
        handle = SessionHandle("s", "wss://x", "t", "eu-west-1")
        assert handle.response_payload() == {
            "SessionId": "s",
            "StreamUrl": "wss://x",
            "TokenValue": "t",
        }

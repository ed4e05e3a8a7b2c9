"""
Tests for the Dataverse Web API client.
"""

import json
from typing import Any

import httpx
import pytest

from detail_composite.clients.dataverse_client import DataverseClient, DataverseSaveTrigger, filter_options
from detail_composite.core.exceptions import DataverseError, FetchError
from detail_composite.domain.context import SaveRequest
from tests.conftest import ACCOUNT_ID

API_URL = "https://contoso.crm.dynamics.com/api/data/v9.2"
API_PATH = "/api/data/v9.2/"
ACCOUNT_METADATA = "EntityDefinitions(LogicalName='account')"


class FakeWebAPI:
    """Answers Web API calls from a path table and records the requests."""

    def __init__(self, routes: dict[str, Any]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def calls(self, resource: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == API_PATH + resource]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        resource = request.url.path[len(API_PATH):]
        if resource not in self.routes:
            return httpx.Response(404, json={"error": {"code": "0x80060888", "message": f"Resource not found: {resource}"}})

        answer = self.routes[resource]
        if callable(answer):
            return answer(request)
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)


def make_client(api: FakeWebAPI, max_retries: int = 1) -> DataverseClient:
    return DataverseClient(
        url=API_URL,
        access_token="token-123",
        timeout=5,
        max_retries=max_retries,
        transport=httpx.MockTransport(api),
    )


@pytest.fixture
def api() -> FakeWebAPI:
    return FakeWebAPI({ACCOUNT_METADATA: {"EntitySetName": "accounts"}})


class TestFilterOptions:
    """Tests for query option encoding."""

    def test_filter_is_percent_encoded(self):
        assert filter_options("name eq 'A&B'") == "?$filter=name%20eq%20%27A%26B%27"

    def test_select_and_top(self):
        assert filter_options("x eq 1", select=["a", "b"], top=1) == "?$select=a,b&$filter=x%20eq%201&$top=1"


class TestRecords:
    """Tests for record retrieval."""

    @pytest.mark.asyncio
    async def test_retrieve_record(self, api: FakeWebAPI, account_record: dict[str, Any]):
        api.routes[f"accounts({ACCOUNT_ID})"] = account_record
        client = make_client(api)

        record = await client.retrieve_record("Account", "{" + ACCOUNT_ID + "}", "?$select=name")

        assert record["name"] == "Contoso"
        request = api.calls(f"accounts({ACCOUNT_ID})")[0]
        assert request.url.params["$select"] == "name"
        assert request.headers["Authorization"] == "Bearer token-123"
        assert "FormattedValue" in request.headers["Prefer"]
        assert request.headers["OData-Version"] == "4.0"
        await client.close()

    @pytest.mark.asyncio
    async def test_entity_set_name_is_cached(self, api: FakeWebAPI, account_record: dict[str, Any]):
        api.routes[f"accounts({ACCOUNT_ID})"] = account_record
        client = make_client(api)

        await client.retrieve_record("account", ACCOUNT_ID)
        await client.retrieve_record("account", ACCOUNT_ID)

        assert len(api.calls(ACCOUNT_METADATA)) == 1
        assert len(api.calls(f"accounts({ACCOUNT_ID})")) == 2
        await client.close()

    @pytest.mark.asyncio
    async def test_retrieve_multiple_records(self, api: FakeWebAPI):
        api.routes["accounts"] = {"value": [{"name": "A"}, {"name": "B"}]}
        client = make_client(api)

        records = await client.retrieve_multiple_records("account", "?$select=name&$top=2")

        assert [r["name"] for r in records] == ["A", "B"]
        assert api.calls("accounts")[0].url.params["$top"] == "2"
        await client.close()

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, api: FakeWebAPI):
        client = make_client(api, max_retries=3)

        with pytest.raises(DataverseError) as exc_info:
            await client.retrieve_record("account", ACCOUNT_ID)

        assert exc_info.value.is_not_found
        assert isinstance(exc_info.value, FetchError)
        assert "Resource not found" in exc_info.value.message
        assert len(api.calls(f"accounts({ACCOUNT_ID})")) == 1
        await client.close()

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self, api: FakeWebAPI, account_record: dict[str, Any]):
        answers = [httpx.Response(503, text="busy"), httpx.Response(200, json=account_record)]
        api.routes[f"accounts({ACCOUNT_ID})"] = lambda request: answers.pop(0)
        client = make_client(api, max_retries=2)

        record = await client.retrieve_record("account", ACCOUNT_ID)

        assert record["name"] == "Contoso"
        assert len(api.calls(f"accounts({ACCOUNT_ID})")) == 2
        await client.close()

    @pytest.mark.asyncio
    async def test_unknown_entity(self, api: FakeWebAPI):
        api.routes["EntityDefinitions(LogicalName='contact')"] = {}
        client = make_client(api)

        with pytest.raises(DataverseError, match="no entity set name"):
            await client.retrieve_record("contact", ACCOUNT_ID)
        await client.close()


class TestEnvironmentVariables:
    """Tests for environment variable lookups."""

    @pytest.mark.asyncio
    async def test_lookup_definition(self, api: FakeWebAPI):
        api.routes["environmentvariabledefinitions"] = {
            "value": [
                {
                    "environmentvariabledefinitionid": "def-1",
                    "schemaname": "new_Config",
                    "defaultvalue": '{"rows": []}',
                }
            ]
        }
        client = make_client(api)

        definition = await client.lookup_definition("new_Config")

        assert definition is not None
        assert definition.definition_id == "def-1"
        assert definition.default_value == '{"rows": []}'
        params = api.calls("environmentvariabledefinitions")[0].url.params
        assert params["$filter"] == "schemaname eq 'new_Config'"
        await client.close()

    @pytest.mark.asyncio
    async def test_lookup_definition_missing(self, api: FakeWebAPI):
        api.routes["environmentvariabledefinitions"] = {"value": []}
        client = make_client(api)

        assert await client.lookup_definition("new_Missing") is None
        await client.close()

    @pytest.mark.asyncio
    async def test_lookup_current_value(self, api: FakeWebAPI):
        api.routes["environmentvariablevalues"] = {"value": [{"value": '{"rows": [[]]}'}]}
        client = make_client(api)

        value = await client.lookup_current_value("def-1")

        assert value == '{"rows": [[]]}'
        params = api.calls("environmentvariablevalues")[0].url.params
        assert params["$filter"] == "_environmentvariabledefinitionid_value eq 'def-1'"
        await client.close()

    @pytest.mark.asyncio
    async def test_lookup_current_value_unset(self, api: FakeWebAPI):
        api.routes["environmentvariablevalues"] = {"value": []}
        client = make_client(api)

        assert await client.lookup_current_value("def-1") is None
        await client.close()


class TestFieldMetadata:
    """Tests for MaxLength lookups."""

    ATTRIBUTE = ACCOUNT_METADATA + "/Attributes(LogicalName='description')"

    @pytest.mark.asyncio
    async def test_memo_field_after_string_miss(self, api: FakeWebAPI):
        api.routes[self.ATTRIBUTE + "/Microsoft.Dynamics.CRM.MemoAttributeMetadata"] = {"MaxLength": 2000}
        client = make_client(api)

        assert await client.get_max_length("account", "Description") == 2000
        assert await client.get_max_length("account", "description") == 2000
        assert len(api.calls(self.ATTRIBUTE + "/Microsoft.Dynamics.CRM.StringAttributeMetadata")) == 1
        await client.close()

    @pytest.mark.asyncio
    async def test_non_text_field(self, api: FakeWebAPI):
        client = make_client(api)

        assert await client.get_max_length("account", "description") is None
        await client.close()


class TestSaveTrigger:
    """Tests for saving the composed value."""

    @pytest.mark.asyncio
    async def test_save_patches_bound_record(self, api: FakeWebAPI):
        api.routes[f"accounts({ACCOUNT_ID})"] = httpx.Response(204)
        client = make_client(api)
        trigger = DataverseSaveTrigger(client)

        await trigger.save(SaveRequest("account", ACCOUNT_ID, "description", "Contoso"))

        request = api.calls(f"accounts({ACCOUNT_ID})")[0]
        assert request.method == "PATCH"
        assert json.loads(request.content) == {"description": "Contoso"}
        await client.close()

    @pytest.mark.asyncio
    async def test_save_without_field(self, api: FakeWebAPI):
        trigger = DataverseSaveTrigger(make_client(api))

        with pytest.raises(ValueError):
            await trigger.save(SaveRequest("account", ACCOUNT_ID, None, "Contoso"))

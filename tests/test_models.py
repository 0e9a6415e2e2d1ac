from mock_spec.parser.models import Condition, Check, Endpoint, Filter, Response, Spec, Step


class TestStep:
    def test_create_step_defaults(self):
        s = Step(operation="uppercase")
        assert s.operation == "uppercase"
        assert s.parameters == {}


class TestFilter:
    def test_destination_defaults_to_source(self):
        f = Filter(source="id")
        assert f.target == ""
        assert f.steps == []
        assert f.destination == "id"

    def test_destination_uses_target(self):
        f = Filter(source="id", target="userId")
        assert f.destination == "userId"


class TestCondition:
    def test_source_condition_kind(self):
        c = Condition(source="role", checks=[Check(name="equals", parameters={"value": "admin"})])
        assert c.kind == "source"
        assert c.any == []
        assert c.all == []

    def test_nested_condition_kind(self):
        leaf = Condition(source="role", checks=[Check(name="exists")])
        assert Condition(any=[leaf]).kind == "any"
        assert Condition(all=[leaf, leaf]).kind == "all"


class TestResponse:
    def test_zero_values(self):
        r = Response()
        assert r.status == 0
        assert r.format == ""
        assert r.body == ""
        assert r.headers == {}

    def test_content_type_by_format(self):
        assert Response(format="json").content_type == "application/json"
        assert Response(format="xml").content_type == "application/xml"
        assert Response(format="raw").content_type is None


class TestEndpoint:
    def test_body_format_alias(self):
        ep = Endpoint(bodyFormat="json", response=Response(status=200))
        assert ep.body_format == "json"
        assert Endpoint(body_format="xml").body_format == "xml"

    def test_serialization_roundtrip(self):
        ep = Endpoint(
            method="GET",
            path="/users",
            filters=[Filter(source="id", steps=[Step(operation="trim", parameters={"value": None})])],
            response=Response(status=200, headers={"X-Mock": ["a", "b"]}),
        )
        data = ep.model_dump(by_alias=True)
        ep2 = Endpoint(**data)
        assert ep2 == ep
        assert "bodyFormat" in data


class TestSpec:
    def test_empty_spec(self):
        spec = Spec()
        assert spec.endpoints == []
        assert spec.definitions.steps == {}
        assert spec.definitions.responses == {}

    def test_walk_endpoints_parents_first(self):
        leaf = Endpoint(path="/a/b", response=Response(status=200))
        parent = Endpoint(path="/a", endpoints=[leaf])
        other = Endpoint(path="/c", response=Response(status=204))
        spec = Spec(endpoints=[parent, other])
        assert [e.path for e in spec.walk_endpoints()] == ["/a", "/a/b", "/c"]

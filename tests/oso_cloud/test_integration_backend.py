"""End-to-end tests of the Oso client against the in-memory fake backend."""

from oso_cloud import Value

alice = Value("User", "alice")
bob = Value("User", "bob")
repo_a = Value("Repo", "a")
repo_b = Value("Repo", "b")
repo_c = Value("Repo", "c")


def test_tell_then_get(backend_oso):
    backend_oso.tell("has_role", alice, "owner", repo_a)

    assert backend_oso.get("has_role", alice, "owner", repo_a) == [["has_role", alice, "owner", repo_a]]


def test_wildcard_get_sends_no_arg_params(backend_oso, backend_state):
    backend_oso.tell("is_admin", alice)
    backend_oso.tell("is_admin", bob)

    result = backend_oso.get("is_admin", None)

    assert result == [["is_admin", alice], ["is_admin", bob]]
    assert backend_state.requests[-1]["params"] == {"predicate": "is_admin"}


def test_get_filters_on_typed_args(backend_oso):
    backend_oso.bulk_tell([["is_admin", alice], ["is_admin", bob]])

    assert backend_oso.get("is_admin", bob) == [["is_admin", bob]]


def test_offset_from_mutation_is_sent_on_following_requests(backend_oso, backend_state):
    backend_oso.tell("is_admin", alice)
    backend_oso.get("is_admin", None)
    backend_oso.authorize(alice, "read", repo_a)

    assert backend_state.requests[0]["offset"] is None
    assert backend_state.requests[1]["offset"] == "offset-1"
    assert backend_state.requests[2]["offset"] == "offset-1"

    backend_oso.delete("is_admin", alice)
    backend_oso.stats()

    assert backend_state.requests[-1]["offset"] == "offset-2"


def test_mutation_without_offset_clears_it(backend_oso, backend_state):
    backend_oso.tell("is_admin", alice)
    backend_state.emit_offsets = False
    backend_oso.tell("is_admin", bob)
    backend_oso.stats()

    assert backend_state.requests[1]["offset"] == "offset-1"
    assert backend_state.requests[2]["offset"] is None


def test_requests_carry_auth_and_version(backend_oso, backend_state):
    backend_oso.stats()

    assert backend_state.requests[0]["authorization"] == "Bearer e_test_key"
    assert backend_state.requests[0]["api_version"] == "0"


def test_bulk_deletes_before_inserting(backend_oso):
    fact = ["has_role", alice, "member", repo_a]

    backend_oso.bulk(delete=[fact], insert=[fact])

    assert backend_oso.get("has_role", alice, None, None) == [fact]
    assert backend_oso.query("has_role", alice, "member", None) == [fact]


def test_bulk_wildcard_delete(backend_oso):
    backend_oso.bulk_tell([["has_role", alice, "member", repo_a], ["has_role", alice, "owner", repo_b]])

    backend_oso.bulk(delete=[["has_role", alice, None, None]], insert=[["has_role", bob, "owner", repo_c]])

    assert backend_oso.get("has_role", None, None, None) == [["has_role", bob, "owner", repo_c]]


def test_delete_missing_fact_is_not_an_error(backend_oso):
    backend_oso.delete("is_admin", alice)

    assert backend_oso.get("is_admin", None) == []


def test_bulk_delete(backend_oso):
    backend_oso.bulk_tell([["is_public", repo_a], ["is_public", repo_b]])
    backend_oso.bulk_delete([["is_public", repo_a]])

    assert backend_oso.get("is_public", None) == [["is_public", repo_b]]


def test_authorize_with_stored_and_context_facts(backend_oso):
    backend_oso.tell("allow", alice, "read", repo_a)

    assert backend_oso.authorize(alice, "read", repo_a) is True
    assert backend_oso.authorize(alice, "write", repo_a) is False
    assert backend_oso.authorize(bob, "read", repo_b, [["allow", bob, "read", repo_b]]) is True
    assert backend_oso.get("allow", bob, None, None) == []


def test_authorize_resources_preserves_input_order_and_duplicates(backend_oso):
    backend_oso.bulk_tell([["allow", alice, "read", repo_a], ["allow", alice, "read", repo_c]])

    result = backend_oso.authorize_resources(alice, "read", [repo_a, repo_b, repo_a, repo_c])

    assert result == [repo_a, repo_a, repo_c]


def test_list_and_actions(backend_oso):
    backend_oso.bulk_tell(
        [
            ["allow", alice, "read", repo_a],
            ["allow", alice, "write", repo_a],
            ["allow", alice, "read", repo_b],
        ]
    )

    assert backend_oso.list(alice, "read", "Repo") == ["a", "b"]
    assert sorted(backend_oso.actions(alice, repo_a)) == ["read", "write"]


def test_query_includes_context_facts(backend_oso):
    backend_oso.tell("is_admin", alice)

    result = backend_oso.query("is_admin", None, context_facts=[["is_admin", bob]])

    assert result == [["is_admin", alice], ["is_admin", bob]]


def test_policy_round_trip(backend_oso):
    backend_oso.policy("actor User {}")

    policy = backend_oso.get_policy()

    assert policy.src == "actor User {}"
    assert policy.filename == ""


def test_stats_and_clear_data(backend_oso):
    backend_oso.bulk_tell([["is_admin", alice], ["is_admin", bob]])
    assert backend_oso.stats().num_facts == 2

    backend_oso.clear_data()

    assert backend_oso.stats().num_facts == 0

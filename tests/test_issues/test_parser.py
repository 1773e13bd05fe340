"""Tests for create-issue input parsing."""

import pytest

from alfred_feeds.issues.parser import (
    apply_default_preferences,
    build_title,
    default_team_id,
    fuzzy_match,
    parse_input,
    process_parameters,
    sanitise,
    validate_title,
)
from alfred_feeds.issues.schemas import IssueMetadata, IssueParams

NOW_MS = 1_790_000_000_000
MINUTE_MS = 60 * 1000


@pytest.fixture
def metadata() -> IssueMetadata:
    """Workspace metadata in the shape the Linear API returns it."""
    return IssueMetadata.model_validate(
        {
            "teams": [
                {
                    "id": "t-eng",
                    "key": "ENG",
                    "name": "Engineering",
                    "createdAt": "2021-01-01T00:00:00Z",
                    "members": {"nodes": [{"id": "u-me", "isMe": True}]},
                },
                {
                    "id": "t-des",
                    "key": "DES",
                    "name": "Design",
                    "createdAt": "2020-01-01T00:00:00Z",
                    "members": {"nodes": [{"id": "u-bob", "isMe": False}]},
                },
                {
                    "id": "t-ops",
                    "key": "OPS",
                    "name": "Platform Ops",
                    "createdAt": "2022-01-01T00:00:00Z",
                    "members": {"nodes": [{"id": "u-me", "isMe": True}]},
                },
            ],
            "projects": [
                {"id": "p-web", "name": "Web App", "teams": {"nodes": [{"id": "t-eng"}]}},
                {"id": "p-brand", "name": "Brand Refresh", "teams": {"nodes": [{"id": "t-des"}]}},
                {"id": "p-web-ops", "name": "Web Infra", "teams": {"nodes": [{"id": "t-ops"}]}},
            ],
            "users": [
                {
                    "id": "u-me",
                    "name": "Alice Smith",
                    "displayName": "alice",
                    "email": "alice@acme.dev",
                    "isMe": True,
                },
                {
                    "id": "u-bob",
                    "name": "Robert Jones",
                    "displayName": "bob",
                    "email": "rjones@acme.dev",
                    "isMe": False,
                },
            ],
        }
    )


class TestSanitise:
    def test_strips_separators_and_case(self):
        assert sanitise("Platform_Ops - Team") == "platformopsteam"

    def test_prefix_match(self):
        assert fuzzy_match("Platform Ops", "plat-o") is True
        assert fuzzy_match("Platform Ops", "ops") is False


class TestParseInput:
    def test_splits_parameters_and_title(self):
        params, title = parse_input("-eng Fix the - login -high redirect")

        assert params == ["-eng", "-high"]
        assert title == ["Fix", "the", "-", "login", "redirect"]

    def test_empty(self):
        assert parse_input("") == ([], [])


class TestMetadataShapes:
    def test_team_membership_flattened(self, metadata):
        assert [t.is_member for t in metadata.teams] == [True, False, True]

    def test_project_team_ids_flattened(self, metadata):
        assert metadata.projects[0].team_ids == ["t-eng"]

    def test_round_trip_through_disk_shape(self, metadata):
        dumped = metadata.model_dump(by_alias=True)

        assert IssueMetadata.model_validate(dumped) == metadata
        assert "isMember" in dumped["teams"][0]


class TestProcessParameters:
    def test_matches_every_kind(self, metadata):
        params = process_parameters(["-eng", "-web", "-bob", "-high"], metadata)

        assert params.team_id == "t-eng"
        assert params.project_id == "p-web"
        assert params.assignee_id == "u-bob"
        assert params.assignee_name == "bob"
        assert params.priority_id == 2
        assert params.unmatched == []

    def test_team_by_name_or_key(self, metadata):
        assert process_parameters(["-platform_ops"], metadata).team_id == "t-ops"
        assert process_parameters(["-des"], metadata).team_id == "t-des"

    def test_user_by_email_local_part(self, metadata):
        assert process_parameters(["-rjones"], metadata).assignee_id == "u-bob"

    def test_projects_restricted_to_matched_team(self, metadata):
        params = process_parameters(["-ops", "-web"], metadata)

        assert params.team_id == "t-ops"
        assert params.project_id == "p-web-ops"

    def test_last_matching_word_wins(self, metadata):
        params = process_parameters(["-low", "-urgent"], metadata)

        assert params.priority_id == 1
        assert params.unmatched == ["-low"]

    def test_priority_claims_word_before_users(self, metadata):
        """Priorities are matched first, so "-h" means high, not a user."""
        params = process_parameters(["-h"], metadata)

        assert params.priority_id == 2
        assert params.assignee_id is None

    def test_unmatched_words_kept(self, metadata):
        params = process_parameters(["-eng", "-xyz"], metadata)

        assert params.unmatched == ["-xyz"]

    def test_without_metadata_only_priorities_match(self):
        params = process_parameters(["-eng", "-p0"], None)

        assert params.priority_id == 1
        assert params.unmatched == ["-eng"]


class TestApplyDefaultPreferences:
    def _with_choices(self, metadata, minutes_ago=5, **choices) -> IssueMetadata:
        ts = NOW_MS - minutes_ago * MINUTE_MS
        update = {}
        for kind, value in choices.items():
            update[f"{kind}_choice"] = value
            update[f"{kind}_choice_timestamp"] = ts
        return metadata.model_copy(update=update)

    def test_defaults_to_oldest_member_team(self, metadata):
        result = apply_default_preferences(IssueParams(), metadata, NOW_MS)

        assert result.team_id == "t-eng"
        assert result.team_name == "Engineering"

    def test_recent_choices_fill_gaps(self, metadata):
        prefs = self._with_choices(
            metadata, teams="t-des", projects="p-brand", users="u-bob", priorities=3
        )

        result = apply_default_preferences(IssueParams(), prefs, NOW_MS)

        assert result.team_id == "t-des"
        assert result.project_id == "p-brand"
        assert result.project_name == "Brand Refresh"
        assert result.assignee_name == "bob"
        assert result.priority_label == "medium"

    def test_expired_choices_ignored(self, metadata):
        prefs = self._with_choices(metadata, minutes_ago=31, teams="t-des", users="u-bob")

        result = apply_default_preferences(IssueParams(), prefs, NOW_MS)

        assert result.team_id == "t-eng"
        assert result.assignee_id is None

    def test_project_without_team_takes_projects_team(self, metadata):
        prefs = self._with_choices(metadata, teams="t-ops")
        params = IssueParams(project_id="p-brand", project_name="Brand Refresh")

        result = apply_default_preferences(params, prefs, NOW_MS)

        assert result.team_id == "t-des"

    def test_explicit_values_win(self, metadata):
        prefs = self._with_choices(metadata, users="u-bob", priorities=3)
        params = IssueParams(assignee_id="u-me", assignee_name="alice", priority_id=1)

        result = apply_default_preferences(params, prefs, NOW_MS)

        assert result.assignee_id == "u-me"
        assert result.priority_id == 1
        assert result.priority_label == "urgent"

    def test_does_not_modify_input(self, metadata):
        params = IssueParams()

        apply_default_preferences(params, metadata, NOW_MS)

        assert params.team_id is None

    def test_default_team_none_when_not_a_member(self, metadata):
        for team in metadata.teams:
            team.is_member = False

        assert default_team_id(metadata) is None


class TestRemember:
    def test_explicit_choices_stored_with_timestamp(self, metadata):
        explicit = IssueParams(team_id="t-ops", priority_id=0)

        updated = metadata.remember(explicit, NOW_MS)

        assert updated.teams_choice == "t-ops"
        assert updated.teams_choice_timestamp == NOW_MS
        assert updated.priorities_choice == 0
        assert updated.users_choice is None

    def test_previous_choice_kept_when_not_given(self, metadata):
        earlier = metadata.remember(IssueParams(assignee_id="u-bob"), NOW_MS - MINUTE_MS)

        updated = earlier.remember(IssueParams(team_id="t-eng"), NOW_MS)

        assert updated.users_choice == "u-bob"
        assert updated.users_choice_timestamp == NOW_MS - MINUTE_MS


class TestTitle:
    def test_build_title_puts_unmatched_first(self):
        assert build_title(["-xyz"], ["Fix", "login"]) == "-xyz Fix login"

    @pytest.mark.parametrize(
        "title,valid",
        [("", False), ("   ", False), ("Fix", False), ("Fix login", True)],
    )
    def test_validate_title(self, title, valid):
        assert validate_title(title).valid is valid

    def test_single_word_message(self):
        assert "multiple words" in validate_title("Fix").message

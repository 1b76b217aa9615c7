"""Integration tests for editor change submission."""

import json

import pytest
from sqlmodel import select

from app.models import (
    ChangeStatus,
    CollaboratorStatus,
    PendingChange,
    ProjectActivity,
    ProjectCollaborator,
    ProjectContentVersion,
)
from app.services.editor_changes import EditorChangeService
from tests.conftest import auth_headers


def editor_changes_url(project_id: int) -> str:
    return f"/api/v1/projects/{project_id}/editor-changes"


@pytest.mark.asyncio
class TestSubmitEditorChange:
    """Tests for POST /projects/{id}/editor-changes."""

    async def test_editor_submits_chapter_change(
        self, client, test_session, project, chapter, editor_token, editor_collaborator
    ):
        response = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "chapter",
                "chapterId": chapter.id,
                "originalContent": chapter.content,
                "proposedContent": "It was already dark.",
                "changeDescription": "Tighter opening",
                "contentTitle": "Chapter 1",
            },
            headers=auth_headers(editor_token),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["status"] == "pending"

        result = await test_session.execute(
            select(PendingChange).where(PendingChange.id == data["pendingChangeId"])
        )
        change = result.scalar_one()
        assert change.chapter_id == chapter.id
        assert change.proposed_content == "It was already dark."
        assert change.status == ChangeStatus.PENDING

        result = await test_session.execute(select(ProjectActivity))
        activity = result.scalar_one()
        assert activity.activity_type == "editor_change_submitted"
        assert activity.description == "Submitted chapter changes for approval: Chapter 1"

    async def test_outline_change_without_chapter(
        self, client, project, editor_token, editor_collaborator
    ):
        response = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "outline",
                "originalContent": "An old synopsis.",
                "proposedContent": "A sharper synopsis.",
            },
            headers=auth_headers(editor_token),
        )

        assert response.status_code == 201

    async def test_chapter_change_requires_chapter_id(
        self, client, project, editor_token, editor_collaborator
    ):
        response = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "chapter",
                "originalContent": "",
                "proposedContent": "New text",
            },
            headers=auth_headers(editor_token),
        )

        assert response.status_code == 400

    async def test_chapter_id_forbidden_for_outline(
        self, client, project, chapter, editor_token, editor_collaborator
    ):
        response = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "outline",
                "chapterId": chapter.id,
                "originalContent": "",
                "proposedContent": "New text",
            },
            headers=auth_headers(editor_token),
        )

        assert response.status_code == 400

    async def test_non_collaborator_is_denied(self, client, project, outsider_token):
        response = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "outline",
                "originalContent": "",
                "proposedContent": "New text",
            },
            headers=auth_headers(outsider_token),
        )

        assert response.status_code == 403
        assert response.json()["error"] == "User is not a collaborator on this project"

    async def test_collaborator_without_editor_role_is_denied(
        self, client, test_session, project, outsider_user, outsider_token
    ):
        test_session.add(
            ProjectCollaborator(
                project_id=project.id,
                user_id=outsider_user.id,
                role="reader",
                status=CollaboratorStatus.ACTIVE,
            )
        )
        await test_session.commit()

        response = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "outline",
                "originalContent": "",
                "proposedContent": "New text",
            },
            headers=auth_headers(outsider_token),
        )

        assert response.status_code == 403
        assert response.json()["error"] == "User does not have editor permissions"

    async def test_secondary_editor_role_is_enough(
        self, client, test_session, project, outsider_user, outsider_token
    ):
        test_session.add(
            ProjectCollaborator(
                project_id=project.id,
                user_id=outsider_user.id,
                role="writer",
                secondary_roles=["editor"],
                status=CollaboratorStatus.ACTIVE,
            )
        )
        await test_session.commit()

        response = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "outline",
                "originalContent": "",
                "proposedContent": "New text",
            },
            headers=auth_headers(outsider_token),
        )

        assert response.status_code == 201

    async def test_project_content_change_records_pending_version(
        self, client, test_session, project, editor_user, editor_token, editor_collaborator
    ):
        response = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "project_content",
                "originalContent": "",
                "proposedContent": "Once upon a   time",
            },
            headers=auth_headers(editor_token),
        )

        assert response.status_code == 201
        data = response.json()
        assert isinstance(data["versionId"], int)

        result = await test_session.execute(
            select(ProjectContentVersion).where(ProjectContentVersion.id == data["versionId"])
        )
        version = result.scalar_one()
        assert version.project_id == project.id
        assert version.version_number == 1
        assert version.content == "Once upon a   time"
        assert version.word_count == 4
        assert version.character_count == len("Once upon a   time")
        assert version.change_summary == "Editor changes pending approval"
        assert version.tags == ["Pending Review"]
        assert version.user_id == editor_user.id
        assert json.loads(version.changes_made)["pending_change_id"] == data["pendingChangeId"]

    async def test_pending_version_numbers_follow_history(
        self, client, test_session, project, editor_token, editor_collaborator
    ):
        test_session.add(
            ProjectContentVersion(project_id=project.id, version_number=3, content="Older body")
        )
        await test_session.commit()

        response = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "project_content",
                "originalContent": "Older body",
                "proposedContent": "Newer body",
                "changeDescription": "Trim the prologue",
            },
            headers=auth_headers(editor_token),
        )

        result = await test_session.execute(
            select(ProjectContentVersion).where(
                ProjectContentVersion.id == response.json()["versionId"]
            )
        )
        version = result.scalar_one()
        assert version.version_number == 4
        assert version.change_summary == "Trim the prologue"

    async def test_pending_version_failure_keeps_submission(
        self, client, test_session, project, editor_token, editor_collaborator, monkeypatch
    ):
        async def broken_version(self, *args, **kwargs):
            raise RuntimeError("history unavailable")

        monkeypatch.setattr(EditorChangeService, "_record_pending_version", broken_version)

        response = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "project_content",
                "originalContent": "",
                "proposedContent": "Once upon a time",
            },
            headers=auth_headers(editor_token),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["versionId"] is None
        result = await test_session.execute(
            select(PendingChange).where(PendingChange.id == data["pendingChangeId"])
        )
        assert result.scalar_one().status == ChangeStatus.PENDING

    async def test_chapter_change_has_no_pending_version(
        self, client, test_session, project, chapter, editor_token, editor_collaborator
    ):
        response = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "chapter",
                "chapterId": chapter.id,
                "originalContent": chapter.content,
                "proposedContent": "It was already dark.",
            },
            headers=auth_headers(editor_token),
        )

        assert response.json()["versionId"] is None
        result = await test_session.execute(select(ProjectContentVersion))
        assert result.scalars().first() is None

    async def test_unknown_project(self, client, editor_token):
        response = await client.post(
            editor_changes_url(9999),
            json={
                "contentType": "outline",
                "originalContent": "",
                "proposedContent": "New text",
            },
            headers=auth_headers(editor_token),
        )

        assert response.status_code == 404


@pytest.mark.asyncio
class TestEditorReviewLoop:
    """Submit, decide, and read the decision back as the editor."""

    async def test_editor_sees_owner_feedback(
        self, client, project, editor_token, editor_collaborator, owner_token
    ):
        submitted = await client.post(
            editor_changes_url(project.id),
            json={
                "contentType": "outline",
                "originalContent": "An old synopsis.",
                "proposedContent": "A flatter synopsis.",
            },
            headers=auth_headers(editor_token),
        )
        change_id = submitted.json()["pendingChangeId"]

        decided = await client.post(
            f"/api/v1/projects/{project.id}/approvals",
            json={
                "pendingChangeId": change_id,
                "decision": "request_revision",
                "feedbackNotes": "Keep the mystery.",
            },
            headers=auth_headers(owner_token),
        )
        assert decided.status_code == 200

        response = await client.get(editor_changes_url(project.id), headers=auth_headers(editor_token))

        assert response.status_code == 200
        changes = response.json()["pendingChanges"]
        assert len(changes) == 1
        assert changes[0]["status"] == "needs_revision"
        assert changes[0]["decisions"][0]["decision"] == "request_revision"
        assert changes[0]["decisions"][0]["feedback_notes"] == "Keep the mystery."

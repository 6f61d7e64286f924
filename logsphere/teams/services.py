"""Service layer for team and roster operations."""

from __future__ import annotations

import re
import secrets
import string
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import current_app

from logsphere.core.constants import (
    FIRESTORE_BATCH_LIMIT,
    INVITATIONS_COLLECTION,
    LOGS_COLLECTION,
    MILESTONES_COLLECTION,
    ROLE_GUIDE,
    ROLE_MEMBER,
    ROSTER_ROLES,
    TEAM_CODE_MAX_ATTEMPTS,
    TEAM_CODE_PREFIX_LENGTH,
    TEAM_CODE_SUFFIX_LENGTH,
    TEAMS_COLLECTION,
    USERS_COLLECTION,
)
from logsphere.errors import (
    DuplicateResourceError,
    InvalidCodeError,
    NotFoundError,
    ValidationError,
)
from .models import Team, roster_field, team_from_snapshot

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference
    from google.cloud.firestore_v1.transaction import Transaction

_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_team_codes(name: str) -> tuple[str, str]:
    """Build a (referral code, guide code) pair for a team name."""
    prefix = re.sub(r"[^a-zA-Z0-9]", "", name)[:TEAM_CODE_PREFIX_LENGTH].upper()
    prefix = prefix or "TEAM"
    suffix = "".join(
        secrets.choice(_SUFFIX_ALPHABET) for _ in range(TEAM_CODE_SUFFIX_LENGTH)
    )
    return f"{prefix}-{suffix}", f"{prefix}-G-{suffix}"


def _check_role(role: str) -> str:
    if role not in ROSTER_ROLES:
        raise ValidationError(f"Cannot join a team as '{role}'.")
    return role


class TeamService:
    """Service class for team-related operations."""

    @staticmethod
    def get_team(db: Client, team_id: str) -> Team:
        """Fetch a team or raise NotFoundError."""
        snapshot = db.collection(TEAMS_COLLECTION).document(team_id).get()
        return team_from_snapshot(snapshot)

    @staticmethod
    def list_teams(db: Client) -> list[Team]:
        """Fetch every team, ordered by name."""
        teams = [
            team_from_snapshot(snap)
            for snap in db.collection(TEAMS_COLLECTION).stream()
        ]
        return sorted(teams, key=lambda t: t["name"].lower())

    @staticmethod
    def list_teams_for_user(db: Client, team_ids: list[str]) -> list[Team]:
        """Fetch the teams listed on a user's profile."""
        if not team_ids:
            return []
        refs = [db.collection(TEAMS_COLLECTION).document(tid) for tid in team_ids]
        return [team_from_snapshot(snap) for snap in db.get_all(refs) if snap.exists]

    @staticmethod
    def _code_in_use(db: Client, field: str, code: str) -> bool:
        query = db.collection(TEAMS_COLLECTION).where(
            filter=firestore.FieldFilter(field, "==", code)
        )
        return bool(list(query.limit(1).stream()))

    @staticmethod
    def _unique_codes(db: Client, name: str) -> tuple[str, str]:
        """Generate codes, retrying while either collides with another team."""
        attempts = current_app.config.get(
            "TEAM_CODE_MAX_ATTEMPTS", TEAM_CODE_MAX_ATTEMPTS
        )
        for _ in range(attempts):
            referral_code, guide_code = generate_team_codes(name)
            if not TeamService._code_in_use(
                db, "referralCode", referral_code
            ) and not TeamService._code_in_use(db, "guideCode", guide_code):
                return referral_code, guide_code
            current_app.logger.warning(
                f"Team code collision for '{name}', regenerating."
            )
        raise DuplicateResourceError(
            "Could not generate a unique team code. Please try again."
        )

    @staticmethod
    def create_team(db: Client, name: str, leader_id: str) -> Team:
        """Create a team led by ``leader_id`` and link it to the leader."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Team name is required.")

        referral_code, guide_code = TeamService._unique_codes(db, name)
        team_ref = db.collection(TEAMS_COLLECTION).document()
        leader_ref = db.collection(USERS_COLLECTION).document(leader_id)
        team_data: dict[str, Any] = {
            "name": name,
            "referralCode": referral_code,
            "guideCode": guide_code,
            "leaderId": leader_id,
            "memberIds": [],
            "guideIds": [],
            "createdAt": firestore.SERVER_TIMESTAMP,
        }

        @firestore.transactional
        def create_in_transaction(
            transaction: Transaction,
            team_ref: DocumentReference,
            leader_ref: DocumentReference,
        ) -> None:
            leader = leader_ref.get(transaction=transaction)
            if not leader.exists:
                raise NotFoundError("User not found.")
            team_ids = list((leader.to_dict() or {}).get("teamIds", []))
            if team_ref.id not in team_ids:
                team_ids.append(team_ref.id)
            transaction.set(team_ref, team_data)
            transaction.update(leader_ref, {"teamIds": team_ids})

        create_in_transaction(db.transaction(), team_ref, leader_ref)
        current_app.logger.info(f"Team {team_ref.id} '{name}' created by {leader_id}")
        return {"id": team_ref.id, **team_data}  # type: ignore[typeddict-item]

    @staticmethod
    def get_team_by_code(db: Client, code: str) -> tuple[Team, str] | None:
        """Find the team a join code belongs to and the role it grants."""
        code = (code or "").strip().upper()
        if not code:
            return None
        teams = db.collection(TEAMS_COLLECTION)
        for field, role in (("referralCode", ROLE_MEMBER), ("guideCode", ROLE_GUIDE)):
            docs = list(
                teams.where(filter=firestore.FieldFilter(field, "==", code))
                .limit(1)
                .stream()
            )
            if docs:
                return team_from_snapshot(docs[0]), role
        return None

    @staticmethod
    def join_team_by_code(db: Client, code: str, user_id: str) -> dict[str, str]:
        """Join the team whose referral or guide code matches ``code``."""
        match = TeamService.get_team_by_code(db, code)
        if match is None:
            raise InvalidCodeError()
        team, role = match
        TeamService.join_team_by_id(db, team["id"], user_id, role)
        return {"teamId": team["id"], "role": role}

    @staticmethod
    def join_team_by_id(db: Client, team_id: str, user_id: str, role: str) -> bool:
        """Add a user to a team roster and the team to the user, atomically.

        Returns False without writing anything when the user is already on
        the team, so repeated invitation acceptance is harmless.
        """
        role = _check_role(role)
        team_ref = db.collection(TEAMS_COLLECTION).document(team_id)
        user_ref = db.collection(USERS_COLLECTION).document(user_id)

        @firestore.transactional
        def join_in_transaction(
            transaction: Transaction,
            team_ref: DocumentReference,
            user_ref: DocumentReference,
        ) -> bool:
            user_snap = user_ref.get(transaction=transaction)
            if not user_snap.exists:
                raise NotFoundError("User not found.")
            team_snap = team_ref.get(transaction=transaction)
            if not team_snap.exists:
                raise NotFoundError("Team not found.")

            team_data = team_snap.to_dict() or {}
            member_ids = list(team_data.get("memberIds", []))
            guide_ids = list(team_data.get("guideIds", []))
            if (
                user_id in member_ids
                or user_id in guide_ids
                or team_data.get("leaderId") == user_id
            ):
                return False

            field = roster_field(role)
            roster = guide_ids if field == "guideIds" else member_ids
            roster.append(user_id)
            transaction.update(team_ref, {field: roster})

            team_ids = list((user_snap.to_dict() or {}).get("teamIds", []))
            if team_id not in team_ids:
                team_ids.append(team_id)
            transaction.update(user_ref, {"teamIds": team_ids, "role": role})
            return True

        joined = join_in_transaction(db.transaction(), team_ref, user_ref)
        if joined:
            current_app.logger.info(f"User {user_id} joined team {team_id} as {role}")
        return joined

    @staticmethod
    def remove_team_member(db: Client, team_id: str, user_id: str, role: str) -> None:
        """Remove a user from a team roster and the team from the user.

        Raises NotFoundError, writing nothing, when the user is not on the
        roster for ``role``.
        """
        role = _check_role(role)
        team_ref = db.collection(TEAMS_COLLECTION).document(team_id)
        user_ref = db.collection(USERS_COLLECTION).document(user_id)

        @firestore.transactional
        def remove_in_transaction(
            transaction: Transaction,
            team_ref: DocumentReference,
            user_ref: DocumentReference,
        ) -> None:
            team_snap = team_ref.get(transaction=transaction)
            if not team_snap.exists:
                raise NotFoundError("Team not found.")
            user_snap = user_ref.get(transaction=transaction)

            field = roster_field(role)
            roster = (team_snap.to_dict() or {}).get(field, [])
            if user_id not in roster:
                raise NotFoundError(f"User is not a {role} of this team.")
            transaction.update(team_ref, {field: [i for i in roster if i != user_id]})

            # A dangling roster id is still removed from the team.
            if user_snap.exists:
                team_ids = (user_snap.to_dict() or {}).get("teamIds", [])
                transaction.update(
                    user_ref, {"teamIds": [t for t in team_ids if t != team_id]}
                )

        remove_in_transaction(db.transaction(), team_ref, user_ref)
        current_app.logger.info(f"User {user_id} removed from team {team_id}")

    @staticmethod
    def update_team_details(db: Client, team_id: str, name: str) -> None:
        """Rename a team."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Team name is required.")
        TeamService.get_team(db, team_id)
        db.collection(TEAMS_COLLECTION).document(team_id).update({"name": name})

    @staticmethod
    def get_team_roster(db: Client, team_id: str) -> dict[str, Any]:
        """Fetch a team together with its leader, members and guides."""
        from logsphere.user.services import UserService  # noqa: PLC0415

        team = TeamService.get_team(db, team_id)
        leader = UserService.get_user_by_id(db, team["leaderId"])
        return {
            "team": team,
            "leader": leader,
            "members": UserService.get_users_by_ids(db, team["memberIds"]),
            "guides": UserService.get_users_by_ids(db, team["guideIds"]),
        }

    @staticmethod
    def delete_team(db: Client, team_id: str) -> dict[str, int]:
        """Delete a team and everything scoped to it.

        Logs, milestones and invitations of the team are deleted and the team
        id is removed from every linked user profile.
        """
        from logsphere.user.services import UserService  # noqa: PLC0415

        team = TeamService.get_team(db, team_id)
        team_ref = db.collection(TEAMS_COLLECTION).document(team_id)

        refs_to_delete = []
        counts = {}
        for collection in (LOGS_COLLECTION, MILESTONES_COLLECTION, INVITATIONS_COLLECTION):
            docs = list(
                db.collection(collection)
                .where(filter=firestore.FieldFilter("teamId", "==", team_id))
                .stream()
            )
            counts[collection] = len(docs)
            refs_to_delete.extend(doc.reference for doc in docs)

        linked_ids = [team["leaderId"], *team["memberIds"], *team["guideIds"]]
        user_updates = []
        for user in UserService.get_users_by_ids(db, linked_ids):
            remaining = [t for t in user["teamIds"] if t != team_id]
            user_updates.append(
                (db.collection(USERS_COLLECTION).document(user["id"]), remaining)
            )

        operations: list[tuple[str, Any, Any]] = [
            ("update", ref, {"teamIds": remaining}) for ref, remaining in user_updates
        ]
        operations.extend(("delete", ref, None) for ref in refs_to_delete)
        operations.append(("delete", team_ref, None))

        for start in range(0, len(operations), FIRESTORE_BATCH_LIMIT):
            batch = db.batch()
            for op, ref, data in operations[start : start + FIRESTORE_BATCH_LIMIT]:
                if op == "update":
                    batch.update(ref, data)
                else:
                    batch.delete(ref)
            batch.commit()

        current_app.logger.info(
            f"Team {team_id} deleted with {counts[LOGS_COLLECTION]} logs, "
            f"{counts[MILESTONES_COLLECTION]} milestones and "
            f"{counts[INVITATIONS_COLLECTION]} invitations"
        )
        return counts

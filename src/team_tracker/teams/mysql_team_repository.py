from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ProjectCoordinator, Team, TeamMember
from .repository import PCRepository, TeamRepository


class MySQLTeamRepository(TeamRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_teams(self) -> Sequence[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM teams ORDER BY name")
            return [Team(team_id=int(r["id"]), name=r["name"]) for r in fetchall(cur)]

    def list_members(self, *, team_id: Optional[int] = None) -> Sequence[TeamMember]:
        sql = "SELECT id, team_id, name, hubstaff_name, department, display_order FROM team_members"
        params: tuple = ()
        if team_id is not None:
            sql += " WHERE team_id=%s"
            params = (int(team_id),)
        sql += " ORDER BY display_order, name"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [
                TeamMember(
                    member_id=int(r["id"]),
                    team_id=r.get("team_id"),
                    name=r["name"],
                    hubstaff_name=r.get("hubstaff_name"),
                    department=r.get("department"),
                    display_order=int(r.get("display_order") or 0),
                )
                for r in fetchall(cur)
            ]

    def update_member_order(self, *, member_id: int, display_order: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE team_members SET display_order=%s WHERE id=%s",
                (int(display_order), int(member_id)),
            )
            return cur.rowcount > 0


class MySQLPCRepository(PCRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[ProjectCoordinator]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, email FROM global_pcs ORDER BY name")
            return [ProjectCoordinator(pc_id=int(r["id"]), name=r["name"], email=r.get("email")) for r in fetchall(cur)]

    def find_by_name(self, name: str) -> Optional[ProjectCoordinator]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, name, email FROM global_pcs WHERE LOWER(name)=LOWER(%s) LIMIT 1",
                ((name or "").strip(),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ProjectCoordinator(pc_id=int(r["id"]), name=r["name"], email=r.get("email"))

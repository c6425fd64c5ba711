from __future__ import annotations

from flask import Flask, request

from ..common.http import current_principal, date_arg, int_arg, json_body, login_required, ok, optional_bool
from ..container import Container
from .service import ChildUpdate


def register(app: Flask, container: Container) -> None:
    @app.route("/api/children", methods=["GET"], endpoint="children_list")
    @login_required
    def list_children():
        active_only = optional_bool(request.args, "active") or False
        children = container.child_service.list_children(current_principal(), active_only=active_only)
        return ok([c.to_dict() for c in children], count=len(children))

    @app.route("/api/children", methods=["POST"], endpoint="children_register")
    @login_required
    def register_child():
        data = json_body()
        child = container.child_service.register_child(
            current_principal(),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            date_of_birth=date_arg(data, "date_of_birth"),
            gender=data.get("gender", ""),
            parent_id=data.get("parent_id"),
            allergies=data.get("allergies"),
            special_needs=data.get("special_needs"),
        )
        return ok(child.to_dict(), status=201)

    @app.route("/api/children/<int:child_id>", methods=["GET"], endpoint="children_get")
    @login_required
    def get_child(child_id: int):
        return ok(container.child_service.get_child(current_principal(), child_id).to_dict())

    @app.route("/api/children/<int:child_id>", methods=["PUT"], endpoint="children_update")
    @login_required
    def update_child(child_id: int):
        data = json_body()
        changes = ChildUpdate(
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            classroom_id=data.get("classroom_id"),
            clear_classroom="classroom_id" in data and data["classroom_id"] is None,
            allergies=data.get("allergies"),
            special_needs=data.get("special_needs"),
            is_active=optional_bool(data, "is_active"),
        )
        child = container.child_service.update_child(current_principal(), child_id, changes)
        return ok(child.to_dict())

    @app.route("/api/children/<int:child_id>", methods=["DELETE"], endpoint="children_deactivate")
    @login_required
    def deactivate_child(child_id: int):
        container.child_service.deactivate_child(current_principal(), child_id)
        return ok(message="Child deactivated")

    @app.route("/api/employee/child-notes", methods=["POST"], endpoint="child_notes_add")
    @login_required
    def add_child_note():
        data = json_body()
        note = container.child_note_service.add_note(
            current_principal(),
            int_arg(data, "child_id"),
            note=data.get("note", ""),
            category=data.get("category"),
            mood=data.get("mood"),
        )
        return ok(note.to_dict(), status=201)

    @app.route("/api/employee/child-notes", methods=["GET"], endpoint="child_notes_list")
    @login_required
    def list_child_notes():
        notes = container.child_note_service.list_notes(current_principal(), int_arg(request.args, "child_id"))
        return ok([n.to_dict() for n in notes], count=len(notes))

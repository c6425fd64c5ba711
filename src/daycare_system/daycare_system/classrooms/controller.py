from __future__ import annotations

from flask import Flask

from ..common.http import current_principal, int_arg, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/classrooms", methods=["GET"], endpoint="classrooms_list")
    @login_required
    def list_classrooms():
        classrooms = container.classroom_service.list_classrooms(current_principal())
        return ok([c.to_dict() for c in classrooms], count=len(classrooms))

    @app.route("/api/classrooms", methods=["POST"], endpoint="classrooms_create")
    @login_required
    def create_classroom():
        data = json_body()
        classroom = container.classroom_service.create_classroom(
            current_principal(),
            name=data.get("name", ""),
            capacity=data.get("capacity"),
            min_age_months=int_arg(data, "min_age_months", required=False) or 0,
            max_age_months=int_arg(data, "max_age_months", required=False) or 72,
            assigned_teacher_id=data.get("assigned_teacher_id"),
        )
        return ok(classroom.to_dict(), status=201)

    @app.route("/api/classrooms/<int:classroom_id>", methods=["GET"], endpoint="classrooms_get")
    @login_required
    def get_classroom(classroom_id: int):
        return ok(container.classroom_service.get_classroom(current_principal(), classroom_id).to_dict())

    @app.route("/api/classrooms/<int:classroom_id>/teacher", methods=["PUT"], endpoint="classrooms_assign_teacher")
    @login_required
    def assign_teacher(classroom_id: int):
        data = json_body()
        classroom = container.classroom_service.assign_teacher(
            current_principal(), classroom_id, data.get("teacher_id")
        )
        return ok(classroom.to_dict())

    @app.route("/api/classrooms/capacity", methods=["GET"], endpoint="classrooms_capacity")
    @login_required
    def capacity():
        return ok(container.classroom_service.capacity_overview(current_principal()))

    @app.route("/api/employee/classroom", methods=["GET"], endpoint="employee_classroom")
    @login_required
    def my_classroom():
        return ok(container.classroom_service.get_my_classroom(current_principal()).to_dict())

    @app.route("/api/employee/classroom/children", methods=["GET"], endpoint="employee_classroom_children")
    @login_required
    def my_classroom_children():
        children = container.classroom_service.list_my_classroom_children(current_principal())
        return ok([c.to_dict() for c in children], count=len(children))

from __future__ import annotations

PLACEHOLDERS = ("student_name", "school_name", "date", "time")


def render_message(template: str, *, student_name: str, school_name: str, date: str, time: str) -> str:
    """Fill ``{student_name}``, ``{school_name}``, ``{date}`` and ``{time}``.

    Plain replacement: unknown braces in the template are left untouched.
    """
    values = {"student_name": student_name, "school_name": school_name, "date": date, "time": time}
    out = template
    for key in PLACEHOLDERS:
        out = out.replace("{" + key + "}", values[key])
    return out

"""
Key layout of the durable store and the ephemeral cache.

Keys are a namespace tag followed by the entity ids, joined with ":".
Ids are percent-encoded so that an id containing ":" can never produce the
same key as a different (course, user) pair.
"""

from urllib.parse import quote

COURSE_ACCESS = "course_access"
USER_COURSES = "user_courses"
COURSE_USERS = "course_users"
COURSE_PREREQUISITES = "course_prereqs"
COURSE = "course"
ADMIN_CONFIG = "admin_config"
ADMINS = "admins"

TEMP_ACCESS = "temp_access"
TEMP_USER_COURSES = "temp_user_courses"
TEMP_COURSE_USERS = "temp_course_users"


def _key(namespace: str, *ids: str) -> str:
    return ":".join([namespace] + [quote(str(i), safe="") for i in ids])


def course_access_key(course_id: str, user_id: str) -> str:
    return _key(COURSE_ACCESS, course_id, user_id)

def user_courses_key(user_id: str) -> str:
    return _key(USER_COURSES, user_id)

def course_users_key(course_id: str) -> str:
    return _key(COURSE_USERS, course_id)

def course_prerequisites_key(course_id: str) -> str:
    return _key(COURSE_PREREQUISITES, course_id)

def course_key(course_id: str) -> str:
    return _key(COURSE, course_id)

def admin_config_key() -> str:
    return ADMIN_CONFIG

def admins_key() -> str:
    return ADMINS


def temp_access_key(course_id: str, user_id: str) -> str:
    return _key(TEMP_ACCESS, course_id, user_id)

def temp_user_courses_key(user_id: str) -> str:
    return _key(TEMP_USER_COURSES, user_id)

def temp_course_users_key(course_id: str) -> str:
    return _key(TEMP_COURSE_USERS, course_id)

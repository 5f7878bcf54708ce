"""
RBAC Contract - authored roles, permissions and grant tables for Sabq Smart.

This module is DATA ONLY. It is read by sabq.auth.rbac, which builds the
immutable registry, catalog, binding and authorizer objects from it and
validates the whole contract before the application serves any request.

Adding a role or a permission is a reviewed edit of this file:
- a new permission code needs Arabic and English labels;
- a new role needs labels, descriptions, a grant row and an assignment row
  (or none, if nobody may assign it).
The wildcard role picks up new permission codes automatically.
"""
from __future__ import annotations

from enum import Enum
from typing import Final

from .assignment import AnyRoleExcept, AssignmentRule
from .bindings import ALL_PERMISSIONS, ExplicitPermissions, PermissionGrant


# ============================================================================
# LOCALES
# ============================================================================

SUPPORTED_LOCALES: Final[tuple[str, ...]] = ("ar", "en")
DEFAULT_LOCALE: Final[str] = "ar"


# ============================================================================
# ROLES - declaration order is display order
# ============================================================================

class RoleName(str, Enum):
    SYSTEM_ADMIN = "system_admin"
    ADMIN = "admin"
    EDITOR = "editor"
    REPORTER = "reporter"
    COMMENTS_MODERATOR = "comments_moderator"
    MEDIA_MANAGER = "media_manager"
    READER = "reader"


ROLE_LABELS: Final[dict[str, dict[str, str]]] = {
    "ar": {
        RoleName.SYSTEM_ADMIN: "مدير النظام",
        RoleName.ADMIN: "مسؤول",
        RoleName.EDITOR: "محرر",
        RoleName.REPORTER: "مراسل",
        RoleName.COMMENTS_MODERATOR: "مشرف تعليقات",
        RoleName.MEDIA_MANAGER: "مدير وسائط",
        RoleName.READER: "قارئ",
    },
    "en": {
        RoleName.SYSTEM_ADMIN: "System Admin",
        RoleName.ADMIN: "Admin",
        RoleName.EDITOR: "Editor",
        RoleName.REPORTER: "Reporter",
        RoleName.COMMENTS_MODERATOR: "Comments Moderator",
        RoleName.MEDIA_MANAGER: "Media Manager",
        RoleName.READER: "Reader",
    },
}

ROLE_DESCRIPTIONS: Final[dict[str, dict[str, str]]] = {
    "ar": {
        RoleName.SYSTEM_ADMIN: "صلاحيات كاملة على النظام",
        RoleName.ADMIN: "إدارة المستخدمين والموافقات التحريرية والإعدادات العامة",
        RoleName.EDITOR: "إنشاء وتحرير ونشر المحتوى وإدارة الوسائط والتصنيفات",
        RoleName.REPORTER: (
            "إنشاء وتحرير المقالات الخاصة فقط دون صلاحيات النشر، مع إمكانية رفع "
            "الوسائط ومتابعة التعليقات والإحصائيات على مقالاته"
        ),
        RoleName.COMMENTS_MODERATOR: "إدارة التعليقات: الموافقة والرفض والحظر",
        RoleName.MEDIA_MANAGER: "إدارة المكتبة الإعلامية والألبومات",
        RoleName.READER: "مستخدم عادي بدون صلاحيات تحريرية",
    },
    "en": {
        RoleName.SYSTEM_ADMIN: "Full system access with all permissions",
        RoleName.ADMIN: "Manages users, editorial approvals and general settings",
        RoleName.EDITOR: "Creates, edits and publishes content; manages media and categories",
        RoleName.REPORTER: (
            "Creates and edits own articles without publishing rights; can upload "
            "media and follow comments and analytics on own articles"
        ),
        RoleName.COMMENTS_MODERATOR: "Moderates comments: approve, reject and ban",
        RoleName.MEDIA_MANAGER: "Manages the media library and albums",
        RoleName.READER: "Regular user without editorial permissions",
    },
}


# ============================================================================
# PERMISSIONS - "<resource>.<action>", explicit only
# ============================================================================

# Locale of each label column in PERMISSIONS rows
PERMISSION_LABEL_COLUMNS: Final[tuple[str, ...]] = ("en", "ar")

# (code, English label, Arabic label), grouped by resource
PERMISSIONS: Final[tuple[tuple[str, str, str], ...]] = (
    # Articles
    ("articles.view", "View Articles", "عرض المقالات"),
    ("articles.create", "Create Articles", "إنشاء المقالات"),
    ("articles.edit_own", "Edit Own Articles", "تعديل المقالات الخاصة"),
    ("articles.edit_any", "Edit Any Article", "تعديل أي مقال"),
    ("articles.publish", "Publish Articles", "نشر المقالات"),
    ("articles.unpublish", "Unpublish Articles", "إلغاء نشر المقالات"),
    ("articles.delete", "Delete Articles", "حذف المقالات"),
    ("articles.archive", "Archive Articles", "أرشفة المقالات"),
    ("articles.feature", "Feature Articles", "تمييز المقالات"),
    # Categories
    ("categories.view", "View Categories", "عرض التصنيفات"),
    ("categories.create", "Create Categories", "إنشاء التصنيفات"),
    ("categories.update", "Update Categories", "تعديل التصنيفات"),
    ("categories.delete", "Delete Categories", "حذف التصنيفات"),
    # Users
    ("users.view", "View Users", "عرض المستخدمين"),
    ("users.create", "Create Users", "إنشاء المستخدمين"),
    ("users.update", "Update Users", "تعديل المستخدمين"),
    ("users.delete", "Delete Users", "حذف المستخدمين"),
    ("users.suspend", "Suspend Users", "تعليق المستخدمين"),
    ("users.ban", "Ban Users", "حظر المستخدمين"),
    ("users.change_role", "Change User Roles", "تغيير أدوار المستخدمين"),
    # Comments
    ("comments.view", "View All Comments", "عرض جميع التعليقات"),
    ("comments.view_own", "View Comments On My Articles", "عرض التعليقات على مقالاتي"),
    ("comments.create", "Create Comments", "إنشاء التعليقات"),
    ("comments.approve", "Approve Comments", "الموافقة على التعليقات"),
    ("comments.reject", "Reject Comments", "رفض التعليقات"),
    ("comments.delete", "Delete Comments", "حذف التعليقات"),
    ("comments.ban_user", "Ban Users From Commenting", "حظر المستخدمين من التعليق"),
    # Media
    ("media.view", "View Media", "عرض الوسائط"),
    ("media.upload", "Upload Media", "رفع الوسائط"),
    ("media.edit", "Edit Media", "تعديل الوسائط"),
    ("media.delete", "Delete Media", "حذف الوسائط"),
    # Settings
    ("settings.view", "View Settings", "عرض الإعدادات"),
    ("settings.update", "Update Settings", "تحديث الإعدادات"),
    # Analytics
    ("analytics.view", "View All Analytics", "عرض جميع التحليلات"),
    ("analytics.view_own", "View Own Analytics", "عرض التحليلات الخاصة"),
    # Tags
    ("tags.view", "View Tags", "عرض الوسوم"),
    ("tags.create", "Create Tags", "إنشاء الوسوم"),
    ("tags.update", "Update Tags", "تعديل الوسوم"),
    ("tags.delete", "Delete Tags", "حذف الوسوم"),
    # System
    ("system.view_audit", "View Activity Logs", "عرض سجلات النشاط"),
)


# ============================================================================
# ROLE -> PERMISSION GRANTS
# ============================================================================

# ALL_PERMISSIONS grants every code in the catalog, including codes added later.
ROLE_PERMISSION_MAPPINGS: Final[dict[str, PermissionGrant]] = {
    RoleName.SYSTEM_ADMIN: ALL_PERMISSIONS,

    RoleName.ADMIN: ExplicitPermissions(frozenset({
        "users.view",
        "users.create",
        "users.update",
        "users.delete",
        "users.suspend",
        "users.ban",
        "users.change_role",
        "articles.view",
        "articles.publish",
        "articles.edit_any",
        "articles.delete",
        "comments.view",
        "comments.approve",
        "media.view",
        "media.upload",
        "settings.view",
        "settings.update",
        "analytics.view",
        "system.view_audit",
    })),

    RoleName.EDITOR: ExplicitPermissions(frozenset({
        "articles.view",
        "articles.create",
        "articles.edit_any",
        "articles.publish",
        "articles.unpublish",
        "articles.feature",
        "media.view",
        "media.upload",
        "media.edit",
        "categories.view",
        "categories.create",
        "categories.update",
        "analytics.view",
    })),

    RoleName.REPORTER: ExplicitPermissions(frozenset({
        "articles.view",
        "articles.create",
        "articles.edit_own",
        "media.view",
        "media.upload",
        # Only comments and analytics on the reporter's own articles
        "comments.view_own",
        "analytics.view_own",
    })),

    RoleName.COMMENTS_MODERATOR: ExplicitPermissions(frozenset({
        "comments.view",
        "comments.approve",
        "comments.reject",
        "comments.delete",
        "comments.ban_user",
    })),

    RoleName.MEDIA_MANAGER: ExplicitPermissions(frozenset({
        "media.view",
        "media.upload",
        "media.edit",
        "media.delete",
    })),

    RoleName.READER: ExplicitPermissions(frozenset()),
}


# ============================================================================
# ROLE ASSIGNMENT - who may grant which role
# ============================================================================

# Keep this a literal table. Roles absent from it may not assign anything.
ROLE_ASSIGNMENT_RULES: Final[dict[str, AssignmentRule]] = {
    RoleName.SYSTEM_ADMIN: AnyRoleExcept(),
    RoleName.ADMIN: AnyRoleExcept(frozenset({RoleName.SYSTEM_ADMIN})),
}

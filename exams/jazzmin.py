JAZZMIN_SETTINGS = {
    "site_title": "ExamHub Admin",
    "site_header": "ExamHub",
    "site_brand": "ExamHub Management",
    "welcome_sign": "Welcome to the ExamHub Admin Portal",
    "copyright": "ExamHub",
    "search_model": ["auth.User", "exams.Exam", "exams.Question"],

    # User Menu
    "user_menu_links": [
        {"model": "auth.user"},
    ],

    # Sidebar Navigation Grouping
    "navigation_expanded": True,
    "topmenu_links": [
        {"name": "Home", "url": "admin:index", "permissions": ["auth.view_user"]},
        {"model": "exams.Exam"},
        {"model": "exams.Result"},
    ],

    "icons": {
        "auth": "fas fa-users-cog",
        "auth.user": "fas fa-user",
        "exams.UserProfile": "fas fa-id-badge",
        "exams.Question": "fas fa-question-circle",
        "exams.Exam": "fas fa-file-signature",
        "exams.Result": "fas fa-poll",
    },

    # Order of menu groups
    "order_with_respect_to": ["exams.Exam", "exams.Question", "exams.Result", "auth"],

    "show_ui_builder": False,
}

JAZZMIN_UI_TWEAKS = {
    "brand_colour": "navbar-primary",
    "accent": "accent-primary",
    "navbar": "navbar-white navbar-light",
    "navbar_fixed": True,
    "sidebar_fixed": True,
    "sidebar": "sidebar-dark-primary",
    "theme": "default",
    "dark_mode_theme": None,
    "button_classes": {
        "primary": "btn-primary",
        "secondary": "btn-secondary",
        "info": "btn-info",
        "warning": "btn-warning",
        "danger": "btn-danger",
        "success": "btn-success"
    }
}

CENTERING_SECTION = "org.centerpane.plugin.centering"

default_config = {
    "_section_hint": (
        "General configuration settings for centerpane, which keeps a "
        "fixed-width content column centered in editor windows."
    ),
    "plugins": {
        "_section_hint": ("Configuration for loading and managing centerpane plugins."),
        "disabled": [],
        "disabled_hint": (
            "A list of plugin module names (e.g., 'centering') that are "
            "skipped during the loading process."
        ),
    },
    "logging": {
        "_section_hint": "Diagnostics output.",
        "level": "INFO",
        "level_hint": (
            "Minimum level written to the console and the log file "
            "(DEBUG, INFO, WARNING, ERROR). DEBUG logs every reconcile pass."
        ),
    },
    CENTERING_SECTION: {
        "_section_hint": (
            "Margin-based centering of the main content column. Changes are "
            "picked up on the next layout change."
        ),
        "visible_width": 128,
        "visible_width_hint": (
            "Width, in character cells, of the column kept centered in the frame."
        ),
        "ignore_name_patterns": ["^minibuf", "^\\s*\\*"],
        "ignore_name_patterns_hint": (
            "Regular expressions matched against buffer names. Windows showing "
            "a matching buffer are never centered."
        ),
        "ignore_modes": ["exwm-mode", "doc-view-mode", "image-mode", "pdf-view-mode"],
        "ignore_modes_hint": (
            "Major modes (and modes derived from them) whose windows are never "
            "centered."
        ),
        "ignore_filters": ["minibuffer"],
        "ignore_filters_hint": (
            "Named window filters that exclude windows from centering. "
            "Available: 'minibuffer', 'dedicated'. Extra predicates can be "
            "registered at runtime with add_ignore_filter()."
        ),
        "gutter_width": 3,
        "gutter_width_hint": (
            "Left margin reserved for line numbers in windows that are not centered."
        ),
        "only_set_left_margin": False,
        "only_set_left_margin_hint": (
            "Only write the left margin and keep the right margin at 0."
        ),
        "minimap_support": True,
        "minimap_support_hint": "Leave minimap windows alone.",
        "line_number_support": True,
        "line_number_support_hint": (
            "Keep centering margins across line-number redraws and pad line "
            "numbers to at least 3 columns."
        ),
        "window_label_support": True,
        "window_label_support_hint": (
            "Leave windows showing window-selection labels alone."
        ),
        "lighter": " Ⓜ",
        "lighter_hint": "Mode-line indicator shown while centering is enabled.",
    },
}

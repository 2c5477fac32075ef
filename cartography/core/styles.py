# cartography/core/styles.py
# Single source of truth for the hand-tuned label overrides and category styling.

NBSP = "\u00a0"

# Forced breaks ("\n") and glued phrases (NBSP) for names the greedy wrap renders badly.
MANUAL_BREAKS_BY_NAME = {
    "History of Management and Administrative Management": "History of Management and Admini- strative Management",
    # Federal agencies and think tanks
    "Archives of the US Senate": "Archives of the US\nSenate",
    # Institutional networks and learned societies
    "Institutional Networks, Learned Societies and Doctrinal Knowledge about Management": (
        f"Institutional Networks, Learned{NBSP}Societies and Doctrinal Knowledge{NBSP}about Management"
    ),
    "Archives of the Society of the Advancement of Management": (
        f"Archives of the Society of{NBSP}the Advancement{NBSP}of Management"
    ),
    # Business schools and consulting corporations
    "Bulletin of the HBS": "Bulletin of\nthe HBS",
    # Computer history, electronic brains and managerial techniques
    "Archives about the history of cybernetics (Macy Proceedings – 1942 and 1946-1953)": (
        f"Archives about{NBSP}the{NBSP}history of cybernetics (Macy{NBSP}Proceedings{NBSP}– 1942 and 1946-1953)"
    ),
    "Archives about the history of organizational and managerial techniques": (
        f"Archives about{NBSP}the{NBSP}history of{NBSP}organizational and{NBSP}managerial techniques"
    ),
    # Archives of contextualization
    "Archives of Contextualization": "Archives of Contextua- lization",
    "Literature Review: History of Management and Administrative Management in the US (1920-1950)": (
        f"Literature Review:{NBSP}History of{NBSP}Management and{NBSP}Administrative Management in the US (1920-1950)"
    ),
    # Extra archives
    "Possible extra-archives": "Possible\nextra-\narchives",
}

# Extra circle padding for names whose wrapped block is wide relative to its height.
EXTRA_PADDING_BY_NAME = {
    "Business Schools & Consulting Corporations": 10,
    "Institutional Networks, Learned Societies and Doctrinal Knowledge about Management": 10,
    "Computer History, Electronic Brains and Managerial Techniques": 7,
}

CATEGORY_STYLES = {
    "HIMO": {"color": "#020048", "css_class": "himo"},
    "Fonds": {"color": "#88bfe7", "css_class": "fonds"},
    "Subfonds": {"color": "#c2def2", "css_class": "subfonds"},
    "Series": {"color": "#ebebf8", "css_class": "series"},
    "Context": {"color": "#bc98df", "css_class": "context"},
    "PendingFonds": {"color": "#56beb9", "css_class": "pendingfonds"},
}

DEFAULT_NODE_COLOR = "#cccccc"

# Children of these grouping nodes take the grouping colour whatever their own category.
PARENT_COLOR_BY_NAME = {
    "Possible extra-archives": "#56beb9",
    "Archives of Contextualization": "#bc98df",
}

GRAPH_TITLE = "HIMO Archives Cartography"

LEGEND_ITEMS = [
    {"label": "Archives in HIMO fonds", "kind": "gradient", "colors": ["#88bfe7", "#c2def2", "#ebebf8"]},
    {"label": "Possible extra-archives", "kind": "circle", "colors": ["#56beb9"]},
    {"label": "Archives of Contextualization", "kind": "circle", "colors": ["#bc98df"]},
    {"label": "Expandable node", "kind": "dashed", "colors": []},
    {"label": "External links", "kind": "icon", "colors": []},
]

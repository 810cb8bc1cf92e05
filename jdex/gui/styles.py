"""
jdex/gui/styles.py
Stylesheet additions layered over the qdarktheme base, for both light and dark.
"""
STYLESHEET = """
/* ----- General Widgets ----- */
QWidget {
    font-family: "Segoe UI", sans-serif;
    font-size: 13px;
}

QLabel#SubHeader {
    color: #0d6efd;
    font-size: 11px;
    font-weight: bold;
    text-transform: uppercase;
    letter-spacing: 1px;
    margin-bottom: 6px;
}

/* ----- Undo indicator (status bar) ----- */
QLabel#UndoDescription {
    color: palette(text);
}
QLabel#UndoCounts {
    color: #6c757d;
    font-size: 11px;
    border-left: 1px solid palette(mid);
    padding-left: 8px;
}

/* ----- Activity log ----- */
QTextEdit#LogArea {
    border: 1px solid palette(mid);
    border-radius: 4px;
    font-family: "Consolas", monospace;
    font-size: 12px;
}
"""


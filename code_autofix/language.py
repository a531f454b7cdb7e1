"""
Language detection — maps file extensions to editor language ids, which are
passed to the generation service alongside the source text.
"""

import os


EXTENSION_MAP = {
    ".py": "python",
    ".js": "javascript",
    ".ts": "typescript",
    ".jsx": "javascriptreact",
    ".tsx": "typescriptreact",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".rb": "ruby",
    ".cs": "csharp",
    ".cpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".hpp": "cpp",
    ".swift": "swift",
    ".kt": "kotlin",
    ".php": "php",
    ".scala": "scala",
    ".r": "r",
    ".lua": "lua",
    ".sh": "shellscript",
    ".ps1": "powershell",
    ".html": "html",
    ".css": "css",
    ".json": "json",
    ".md": "markdown",
}

LANGUAGE_NAMES = {
    "python": "Python",
    "javascript": "JavaScript",
    "javascriptreact": "JavaScript (React)",
    "typescript": "TypeScript",
    "typescriptreact": "TypeScript (React)",
    "go": "Go",
    "rust": "Rust",
    "java": "Java",
    "ruby": "Ruby",
    "csharp": "C#",
    "cpp": "C++",
    "c": "C",
    "swift": "Swift",
    "kotlin": "Kotlin",
    "php": "PHP",
    "scala": "Scala",
    "r": "R",
    "lua": "Lua",
    "shellscript": "Shell",
    "powershell": "PowerShell",
    "html": "HTML",
    "css": "CSS",
    "json": "JSON",
    "markdown": "Markdown",
    "plaintext": "plain text",
}


def detect_language_id(path: str) -> str:
    """Return the language id for *path*, ``plaintext`` when unknown."""
    ext = os.path.splitext(path)[1].lower()
    return EXTENSION_MAP.get(ext, "plaintext")


def get_language_name(language_id: str) -> str:
    return LANGUAGE_NAMES.get(language_id, language_id)

"""
Constants and configuration defaults for cody_cli.
"""
from pathlib import Path
from typing import Final

APP_NAME: Final[str] = "cody"
APP_VERSION: Final[str] = "1.1.0"
APP_DESCRIPTION: Final[str] = "Your AI coding assistant in the terminal"

CONFIG_DIR: Final[Path] = Path.home() / ".cody"
CONFIG_FILE: Final[Path] = CONFIG_DIR / "config.json"
HISTORY_FILE: Final[Path] = CONFIG_DIR / "history.json"
MODELS_CACHE_FILE: Final[Path] = CONFIG_DIR / "models.json"

DEFAULT_API_URL: Final[str] = "https://openrouter.ai/api/v1"
DEFAULT_MAX_TOKENS: Final[int] = 4096
DEFAULT_TEMPERATURE: Final[float] = 0.7
DEFAULT_TIMEOUT: Final[float] = 120.0
CONNECTION_TEST_TIMEOUT: Final[float] = 10.0
MODELS_FETCH_TIMEOUT: Final[float] = 30.0
MODELS_CACHE_TTL_HOURS: Final[int] = 24

SLASH_PREFIX: Final[str] = "/"

OPENROUTER_REFERER: Final[str] = "https://github.com/cody-cli"
OPENROUTER_TITLE: Final[str] = "Cody CLI"

# Directories never shown in project structures sent to the model
SKIP_DIRS: Final[frozenset] = frozenset({
    "node_modules", "__pycache__", "dist", "build", ".git",
    ".next", "coverage", ".cache", "vendor", "target", ".vscode",
    ".idea", "out", "bin", "obj",
})

SYSTEM_PROMPT: Final[str] = """You are Cody, a friendly and expert coding assistant.

## Your Personality:
- You're helpful, conversational, and knowledgeable
- You chat naturally when users want to talk
- You switch to coding mode when users need code
- You're concise but not robotic

## When to Code:
Only use the file format when users:
- Ask you to create, write, or generate files
- Ask you to build something
- Request code for a specific purpose
- Say "make", "create", "build", "write code", etc.

## When to Chat:
Just respond normally when users:
- Say hi, hello, or greet you
- Ask questions about concepts
- Want explanations or advice
- Are having a conversation

## File Creation Format:
When creating files, use this exact format:

```python:script.py
# code here
```

```typescript:src/utils/helper.ts
// code here
```

Format: ```language:path/to/filename.ext

## Coding Rules (when coding):
1. Write complete, functional code
2. Include error handling
3. Follow best practices
4. Create full project structures when needed
5. Be concise - code speaks louder than explanations

## Your Expertise:
- Full-stack web development
- System scripts and automation
- APIs, CLIs, games, data processing
- Any programming language or framework

You're a developer's companion - chat when they want to chat, code when they need code."""

FIRST_MESSAGE_TEMPLATE: Final[str] = (
    "Project structure:\n{structure}\n\n"
    "Help me code. Use ```lang:filename.ext for files.\n\n"
    "User request: {message}"
)

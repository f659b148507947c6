"""Technical term correction for offline transcripts."""

import re
from typing import Dict

from ...utils.logger import get_logger

logger = get_logger(__name__)

# Lower-cased spoken/transcribed form -> canonical spelling.
# Plain English words that double as product names (rest, express, swift...)
# are left out so ordinary prose is not rewritten.
LATIN_TERMS: Dict[str, str] = {
    # Languages
    "javascript": "JavaScript",
    "typescript": "TypeScript",
    "python": "Python",
    "golang": "Golang",
    "kotlin": "Kotlin",
    # Frameworks & Libraries
    "reactjs": "React.js",
    "react.js": "React.js",
    "nextjs": "Next.js",
    "next.js": "Next.js",
    "vuejs": "Vue.js",
    "vue.js": "Vue.js",
    "nodejs": "Node.js",
    "node.js": "Node.js",
    "fastapi": "FastAPI",
    "django": "Django",
    "springboot": "Spring Boot",
    "spring boot": "Spring Boot",
    "tailwind css": "Tailwind CSS",
    "tailwindcss": "Tailwind CSS",
    "swiftui": "SwiftUI",
    "pyside": "PySide",
    "pytorch": "PyTorch",
    "tensorflow": "TensorFlow",
    "langchain": "LangChain",
    # Tools & Platforms
    "docker": "Docker",
    "kubernetes": "Kubernetes",
    "k8s": "K8s",
    "github": "GitHub",
    "gitlab": "GitLab",
    "webpack": "webpack",
    "redis": "Redis",
    "postgres": "PostgreSQL",
    "postgresql": "PostgreSQL",
    "mysql": "MySQL",
    "mongodb": "MongoDB",
    "sqlite": "SQLite",
    "aws": "AWS",
    "gcp": "GCP",
    "terraform": "Terraform",
    "nginx": "Nginx",
    "linux": "Linux",
    "macos": "macOS",
    "ios": "iOS",
    "xcode": "Xcode",
    "vscode": "VS Code",
    "vs code": "VS Code",
    "visual studio code": "VS Code",
    "intellij": "IntelliJ",
    "neovim": "Neovim",
    # AI/ML
    "openai": "OpenAI",
    "chatgpt": "ChatGPT",
    "hugging face": "Hugging Face",
    "huggingface": "Hugging Face",
    "llm": "LLM",
    "mlops": "MLOps",
    # Concepts & Acronyms
    "api": "API",
    "restful": "RESTful",
    "graphql": "GraphQL",
    "grpc": "gRPC",
    "json": "JSON",
    "yaml": "YAML",
    "html": "HTML",
    "css": "CSS",
    "sql": "SQL",
    "nosql": "NoSQL",
    "ci cd": "CI/CD",
    "cicd": "CI/CD",
    "devops": "DevOps",
    "saas": "SaaS",
    "oauth": "OAuth",
    "jwt": "JWT",
    "sdk": "SDK",
    "cli": "CLI",
    "crud": "CRUD",
    "orm": "ORM",
}

# Phonetic renderings that speech models emit in Chinese -> canonical term.
CJK_TERMS: Dict[str, str] = {
    "派森": "Python",
    "加瓦腳本": "JavaScript",
    "加瓦脚本": "JavaScript",
    "吉特哈布": "GitHub",
    "吉特哈伯": "GitHub",
    "庫伯內蒂斯": "Kubernetes",
    "库伯内蒂斯": "Kubernetes",
    "多克容器": "Docker 容器",
    "瑞艾克特": "React",
    "拍森": "Python",
    "傑森格式": "JSON 格式",
    "杰森格式": "JSON 格式",
    "歐本AI": "OpenAI",
    "欧本AI": "OpenAI",
}


def _alternation(keys) -> str:
    # Longest first so "tailwind css" wins over a shorter overlapping key.
    return "|".join(re.escape(k) for k in sorted(keys, key=lambda k: (-len(k), k)))


# Word boundary is relative to ASCII word characters so that terms embedded
# in CJK text ("用reactjs寫") still match.
_LATIN_PATTERN = re.compile(
    rf"(?<![A-Za-z0-9_])(?:{_alternation(LATIN_TERMS)})(?![A-Za-z0-9_])",
    re.IGNORECASE,
)
_CJK_PATTERN = re.compile(_alternation(CJK_TERMS))


def apply_tech_terms(text: str) -> str:
    if not text:
        return text

    result = _LATIN_PATTERN.sub(lambda m: LATIN_TERMS[m.group(0).lower()], text)
    result = _CJK_PATTERN.sub(lambda m: CJK_TERMS[m.group(0)], result)

    if result != text:
        logger.debug(f"Applied tech term corrections: '{text[:50]}' -> '{result[:50]}'")

    return result

"""Bidirectional synonym dictionary used for query expansion."""

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

DEFAULT_SYNONYMS: dict[str, list[str]] = {
    # Core auth features
    "로그인": ["login", "signin", "auth"],
    "로그아웃": ["logout", "signout"],
    "회원가입": ["signup", "register", "join"],
    "인증": ["authentication", "auth"],
    # User info (all served by the info API)
    "내정보": ["info", "myinfo", "account info"],
    "프로필": ["profile", "user profile", "info"],
    "사용자정보": ["user info", "account", "info"],
    "마이페이지": ["mypage", "my page", "info"],
    "계정정보": ["account info", "info"],
    # Auth mechanisms
    "토큰": ["token", "jwt", "bearer"],
    "쿠키": ["cookie", "session"],
    # Frameworks
    "react": ["리액트", "jsx", "tsx"],
    "vue": ["뷰", "vuejs"],
    "next.js": ["nextjs", "next", "넥스트"],
    "바닐라": ["vanilla", "javascript", "js"],
    # CRUD
    "생성": ["create", "add", "new"],
    "조회": ["get", "fetch", "read"],
    "수정": ["update", "edit", "modify"],
    "삭제": ["delete", "remove"],
}


def _normalize(term: str) -> str:
    return term.strip().lower()


@dataclass(frozen=True)
class SynonymStats:
    total_terms: int
    total_synonyms: int
    avg_synonyms_per_term: float


class SynonymDictionary:
    """
    Canonical term -> synonyms table with a reverse index (synonym -> keys).

    Expansion is symmetric but one hop only: a term pulls in its own
    synonyms, plus the key and sibling synonyms of every entry listing it.

    Thread Safety:
        Mutations and reads are serialized by a lock, so the dictionary can
        be updated while queries are running.
    """

    def __init__(self, entries: Mapping[str, Iterable[str]] | None = None):
        """
        Args:
            entries: Initial table; DEFAULT_SYNONYMS when None
        """
        self._forward: dict[str, list[str]] = {}
        self._reverse: dict[str, set[str]] = {}
        self._lock = threading.Lock()

        source = DEFAULT_SYNONYMS if entries is None else entries
        for term, synonyms in source.items():
            self._add(term, synonyms)

    def _add(self, term: str, synonyms: Iterable[str]) -> None:
        key = _normalize(term)
        if not key:
            return
        existing = self._forward.setdefault(key, [])
        for synonym in synonyms:
            normalized = _normalize(synonym)
            if not normalized or normalized in existing:
                continue
            existing.append(normalized)
            self._reverse.setdefault(normalized, set()).add(key)
        if not existing:
            del self._forward[key]

    def get_synonyms(self, term: str) -> list[str]:
        """Direct synonyms of a canonical term (empty if unknown)."""
        with self._lock:
            return list(self._forward.get(_normalize(term), []))

    def expand(self, terms: Iterable[str]) -> list[str]:
        """
        Expand terms with their synonyms in both directions.

        Returns:
            Deduplicated list in first-seen order; each input precedes its
            own synonyms.
        """
        expanded: dict[str, None] = {}
        with self._lock:
            for term in terms:
                normalized = _normalize(term)
                if not normalized:
                    continue
                expanded[normalized] = None

                for synonym in self._forward.get(normalized, []):
                    expanded[synonym] = None

                for key in sorted(self._reverse.get(normalized, ())):
                    expanded[key] = None
                    for sibling in self._forward.get(key, []):
                        expanded[sibling] = None

        return list(expanded)

    def add_synonym(self, term: str, synonyms: Iterable[str]) -> None:
        """Add synonyms to a term, creating the entry if needed."""
        with self._lock:
            self._add(term, list(synonyms))

    def remove_synonym(self, term: str, synonym: str) -> None:
        """Remove one synonym; the entry is deleted when its last synonym goes."""
        key = _normalize(term)
        normalized = _normalize(synonym)
        with self._lock:
            synonyms = self._forward.get(key)
            if synonyms is None or normalized not in synonyms:
                return
            synonyms.remove(normalized)

            keys = self._reverse.get(normalized)
            if keys is not None:
                keys.discard(key)
                if not keys:
                    del self._reverse[normalized]

            if not synonyms:
                del self._forward[key]

    def has_term(self, term: str) -> bool:
        """True if the term is a canonical key or listed as a synonym."""
        normalized = _normalize(term)
        with self._lock:
            return normalized in self._forward or normalized in self._reverse

    def get_all_terms(self) -> list[str]:
        """Every key and synonym, sorted."""
        with self._lock:
            return sorted(set(self._forward) | set(self._reverse))

    def stats(self) -> SynonymStats:
        with self._lock:
            total_terms = len(self._forward)
            total_synonyms = sum(len(s) for s in self._forward.values())
        average = total_synonyms / total_terms if total_terms else 0.0
        return SynonymStats(
            total_terms=total_terms,
            total_synonyms=total_synonyms,
            avg_synonyms_per_term=round(average, 2),
        )

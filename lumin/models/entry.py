"""Journal entry models"""
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

Mood = Literal["amazing", "happy", "neutral", "sad", "angry", "anxious", "stressed", "excited"]
Category = Literal["personal", "work", "health", "goals", "gratitude", "reflection", "other"]

MOOD_EMOJIS = {
    "amazing": "🤩",
    "happy": "😊",
    "neutral": "😐",
    "sad": "😢",
    "angry": "😠",
    "anxious": "😰",
    "stressed": "😫",
    "excited": "🎉",
}

MIN_NOTES_LENGTH = 10
MAX_NOTES_LENGTH = 5000
MAX_TITLE_LENGTH = 100


class EntryLocation(BaseModel):
    enabled: bool = False
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    place_name: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


def _check_notes(v: str) -> str:
    v = v.strip()
    if len(v) < MIN_NOTES_LENGTH:
        raise ValueError(f"Notes must be at least {MIN_NOTES_LENGTH} characters")
    return v


def _normalize_tags(tags: List[str]) -> List[str]:
    seen = []
    for tag in tags:
        tag = tag.strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class EntryCreate(BaseModel):
    mood: Mood
    mood_intensity: int = Field(default=5, ge=1, le=10)
    title: Optional[str] = Field(default=None, max_length=MAX_TITLE_LENGTH)
    notes: str = Field(..., max_length=MAX_NOTES_LENGTH)
    tags: List[str] = Field(default_factory=list)
    category: Category = "personal"
    location: Optional[EntryLocation] = None
    is_private: bool = True

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: str) -> str:
        return _check_notes(v)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: List[str]) -> List[str]:
        return _normalize_tags(v)


class EntryUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""
    mood: Optional[Mood] = None
    mood_intensity: Optional[int] = Field(default=None, ge=1, le=10)
    title: Optional[str] = Field(default=None, max_length=MAX_TITLE_LENGTH)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)
    tags: Optional[List[str]] = None
    category: Optional[Category] = None
    location: Optional[EntryLocation] = None
    is_private: Optional[bool] = None

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_notes(v)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return None if v is None else _normalize_tags(v)


class EntryFilters(BaseModel):
    mood: Optional[Mood] = None
    category: Optional[Category] = None
    tags: List[str] = Field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


def count_words(text: str) -> int:
    return len(text.split())


def entry_document(data: EntryCreate, now: datetime, today: date) -> dict:
    """Row values for a new entry (XP is filled in by the caller)"""
    return {
        "mood": data.mood,
        "mood_emoji": MOOD_EMOJIS[data.mood],
        "mood_intensity": data.mood_intensity,
        "title": data.title,
        "notes": data.notes,
        "tags": data.tags,
        "category": data.category,
        "location": data.location.model_dump() if data.location else None,
        "is_private": data.is_private,
        "word_count": count_words(data.notes),
        "entry_date": now,
        "entry_day": today,
        "xp_awarded": 0,
    }

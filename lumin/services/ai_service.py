"""
AI coach integration

Renders fixed prompt templates from plain user context, sends them to the
configured model and parses the JSON the model returns.

Every public coroutine returns a dict with a `success` flag. On any failure
the dict carries `error` and, where a fallback is defined in
FALLBACK_PROVIDERS, static content under the same key a successful call uses.
There is no retry: the fallback is the degradation path.
"""
import copy
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from lumin.config import AI_MODEL, AI_MAX_TOKENS, OPENAI_API_KEY, ANTHROPIC_API_KEY
from lumin.exceptions import AIServiceError
from lumin.observability.metrics import ai_request_duration_seconds, ai_requests_total
from lumin.utils.ai_cache import AICache

logger = logging.getLogger(__name__)

DEFAULT_PROMPTS = [
    "What made you smile today?",
    "What's one thing you're grateful for?",
    "How are you feeling right now?",
]

DEFAULT_MOTIVATION = {
    "message": "Every step forward counts. You're doing great by showing up today! 🌟",
    "action_button": {"text": "Create entry", "action": "entry"},
}

CHAT_FALLBACK_MESSAGE = "I'm having trouble connecting right now. Please try again! 🌟"

# Result key -> static content returned when the model call fails
FALLBACK_PROVIDERS: Dict[str, Callable[[], Any]] = {
    "prompts": lambda: list(DEFAULT_PROMPTS),
    "motivation": lambda: copy.deepcopy(DEFAULT_MOTIVATION),
    "message": lambda: CHAT_FALLBACK_MESSAGE,
}

CompletionFn = Callable[[str], Awaitable[str]]


@dataclass
class AIResult:
    """Outcome of a single model call"""
    success: bool
    data: Any = None
    error: Optional[str] = None


def extract_json(text: str) -> Any:
    """Parse JSON from a model reply, tolerating markdown code fences"""
    content = text.strip()
    if "```json" in content:
        json_str = content.split("```json")[1].split("```")[0].strip()
    elif "```" in content:
        json_str = content.split("```")[1].split("```")[0].strip()
    else:
        json_str = content
    return json.loads(json_str)


# ==========================================
# Prompt templates
# ==========================================

def build_smart_prompts_prompt(context: Dict[str, Any]) -> str:
    recent_moods = ", ".join(context.get("recent_moods") or []) or "none logged"
    return f"""
You are a journaling coach. Generate 3 thoughtful journal prompts for a user.

Context:
- Recent moods: {recent_moods}
- Active goals: {context.get("goals_count", 0)}
- Time: {context.get("time_of_day", "day")}
- Current streak: {context.get("streak", 0)} days

Requirements:
1. Make prompts mood-appropriate and supportive
2. Connect to their goals when relevant
3. Use time-of-day context (morning = reflection, evening = gratitude)
4. Keep each prompt under 15 words
5. Be encouraging and specific

Return ONLY a JSON array with 3 prompts:
[
  "Prompt 1 text here",
  "Prompt 2 text here",
  "Prompt 3 text here"
]

No markdown, no explanation, just the JSON array.
"""


def build_mood_analysis_prompt(weekly_data: Dict[str, Any]) -> str:
    entries = weekly_data.get("entries") or []
    samples = " | ".join(f'{e["mood"]}: "{e["notes"][:100]}"' for e in entries[:5])
    return f"""
You are a mental wellness analyst. Analyze this user's weekly journal data.

Data:
- Total entries: {len(entries)}
- Mood distribution: {json.dumps(weekly_data.get("mood_distribution") or {})}
- Sample entries: {samples}

Provide analysis in this EXACT JSON format:
{{
  "summary": "2-3 sentence overall summary",
  "patterns": ["Pattern 1 observation", "Pattern 2 observation"],
  "insights": ["Insight 1", "Insight 2"],
  "suggestions": ["Actionable suggestion 1", "Actionable suggestion 2"],
  "encouragement": "Personalized encouraging message"
}}

Keep it concise, supportive, and actionable. No markdown, just JSON.
"""


def build_goal_plan_prompt(goal: Dict[str, Any]) -> str:
    return f"""
You are a goal-setting coach. Help break down this goal into actionable steps.

Goal:
- Title: {goal.get("title")}
- Description: {goal.get("description") or "none"}
- Target: {goal.get("target_value")} by {goal.get("target_date") or "no deadline"}
- Category: {goal.get("category", "other")}

Create a detailed plan in this EXACT JSON format:
{{
  "breakdown": [
    {{"phase": "Phase 1: [Name]", "duration": "X weeks", "tasks": ["Task 1", "Task 2", "Task 3"]}},
    {{"phase": "Phase 2: [Name]", "duration": "X weeks", "tasks": ["Task 1", "Task 2", "Task 3"]}}
  ],
  "milestones": [
    {{"title": "Milestone 1", "target_value": 25, "description": "What this achieves"}},
    {{"title": "Milestone 2", "target_value": 50, "description": "What this achieves"}},
    {{"title": "Milestone 3", "target_value": 75, "description": "What this achieves"}}
  ],
  "tips": ["Practical tip 1", "Practical tip 2", "Practical tip 3"],
  "motivation": "Encouraging message about achieving this goal"
}}

Be specific, realistic, and encouraging. No markdown, just JSON.
"""


def build_habit_prompt(user_data: Dict[str, Any]) -> str:
    entries = user_data.get("entries") or []
    themes = " | ".join(e["notes"][:50] for e in entries[:10]) or "no entries yet"
    goals = ", ".join(g["title"] for g in user_data.get("goals") or []) or "none"
    habits = ", ".join(user_data.get("current_habits") or []) or "None yet"
    return f"""
You are a habit-building coach. Suggest new habits based on user data.

Context:
- Recent journal themes: {themes}
- Goals: {goals}
- Current habits: {habits}

Suggest habits in this EXACT JSON format:
{{
  "habits": [
    {{
      "title": "Habit name",
      "description": "Why this helps",
      "frequency": "daily" or "weekly",
      "difficulty": "easy" or "medium" or "hard",
      "category": "health" or "productivity" or "mindfulness" or "learning",
      "xp_reward": 30
    }}
  ],
  "reasoning": "Why these habits were chosen for this user"
}}

Suggest 3-5 habits. Be specific and actionable. No markdown, just JSON.
"""


def build_motivation_prompt(context: Dict[str, Any]) -> str:
    return f"""
You are a supportive life coach. Generate a personalized motivational message.

Context:
- Current mood: {context.get("mood") or "unknown"}
- Streak: {context.get("streak", 0)} days
- Recent progress: {context.get("recent_progress") or "getting started"}
- Goals: {context.get("goals_count", 0)} active
- Time: {context.get("time_of_day", "day")}
- Situation: {context.get("situation") or "general"}

Requirements:
1. Be genuine and empathetic
2. Acknowledge their current state
3. Provide specific encouragement
4. Keep it under 100 words
5. End with an actionable next step

Return a JSON object:
{{
  "message": "The motivational message",
  "action_button": {{
    "text": "Button text (e.g., 'Create entry', 'Review goals')",
    "action": "entry" or "goal" or "challenge"
  }}
}}

No markdown, just JSON.
"""


def build_chat_prompt(messages: List[Dict[str, str]], user_data: Dict[str, Any]) -> str:
    user_context = f"""
User Profile:
- Level: {user_data.get("level", 1)}
- XP: {user_data.get("xp", 0)}
- Current Streak: {user_data.get("streak", 0)} days
- Active Goals: {user_data.get("goals_count", 0)}
- Recent Mood: {user_data.get("recent_mood") or "unknown"}
- Total Entries: {user_data.get("total_entries", 0)}
"""
    history = "\n".join(
        f"{'User' if msg['role'] == 'user' else 'LUMIN'}: {msg['content']}"
        for msg in messages
    )
    return f"""
You are LUMIN AI, a supportive personal growth assistant. You help users with:
- Journaling and self-reflection
- Goal setting and tracking
- Habit building
- Motivation and encouragement
{user_context}
Instructions:
1. Be warm, supportive, and conversational
2. Use the user's data to personalize responses
3. Suggest quick actions when relevant (create entry, set goal, etc.)
4. Keep responses under 150 words unless asked for detail
5. Use emojis sparingly (1-2 per message)
6. Be encouraging about their progress

Current conversation:
{history}
LUMIN:"""


# ==========================================
# Reply parsers
# ==========================================

def _parse_prompts(text: str) -> List[str]:
    prompts = extract_json(text)
    if not isinstance(prompts, list) or not all(isinstance(p, str) for p in prompts):
        raise ValueError("Expected a JSON array of prompt strings")
    prompts = [p.strip() for p in prompts if p.strip()]
    if not prompts:
        raise ValueError("Reply contained no prompts")
    return prompts[:3]


def _parse_object(text: str) -> Dict[str, Any]:
    data = extract_json(text)
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object")
    return data


def _parse_motivation(text: str) -> Dict[str, Any]:
    data = _parse_object(text)
    if not data.get("message"):
        raise ValueError("Motivation reply has no message")
    # Accept the camelCase key some models echo back
    if "actionButton" in data and "action_button" not in data:
        data["action_button"] = data.pop("actionButton")
    return data


def _parse_chat(text: str) -> str:
    message = text.strip()
    if not message:
        raise ValueError("Empty chat reply")
    return message


class AIService:
    """
    Model client for the AI coach

    The completion transport is injectable so prompts, parsing and fallbacks
    can be exercised without network access. The provider is chosen from the
    model prefix ("openai:gpt-4o-mini", "anthropic:claude-3-5-haiku-latest").
    """

    def __init__(
        self,
        model: str = AI_MODEL,
        completion: Optional[CompletionFn] = None,
        cache: Optional[AICache] = None,
        max_tokens: int = AI_MAX_TOKENS
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.cache = cache
        self._completion = completion or self._complete_with_provider

    async def _complete_with_provider(self, prompt: str) -> str:
        if self.model.startswith("openai:"):
            return await self._complete_with_openai(prompt)
        elif self.model.startswith("anthropic:"):
            return await self._complete_with_anthropic(prompt)
        raise AIServiceError(f"Unknown AI model: {self.model}")

    async def _complete_with_openai(self, prompt: str) -> str:
        if not OPENAI_API_KEY:
            raise AIServiceError("OPENAI_API_KEY is not configured")
        from openai import AsyncOpenAI

        client = AsyncOpenAI(api_key=OPENAI_API_KEY)
        model_name = self.model.split(":", 1)[1]
        response = await client.chat.completions.create(
            model=model_name,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""

    async def _complete_with_anthropic(self, prompt: str) -> str:
        if not ANTHROPIC_API_KEY:
            raise AIServiceError("ANTHROPIC_API_KEY is not configured")
        from anthropic import AsyncAnthropic

        client = AsyncAnthropic(api_key=ANTHROPIC_API_KEY)
        model_name = self.model.split(":", 1)[1]
        response = await client.messages.create(
            model=model_name,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.content[0].text

    async def complete(self, prompt: str) -> str:
        """Send a prompt to the model, consulting the cache when one is set"""
        if self.cache is not None:
            key = AICache.make_key(prompt)
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("AI cache hit")
                return cached
            text = await self._completion(prompt)
            self.cache.set(key, text)
            return text
        return await self._completion(prompt)

    async def run(self, operation: str, prompt: str, parse: Callable[[str], Any]) -> AIResult:
        start_time = time.perf_counter()
        try:
            text = await self.complete(prompt)
            result = AIResult(success=True, data=parse(text))
        except Exception as e:
            logger.error(f"AI {operation} failed: {type(e).__name__}: {e}")
            result = AIResult(success=False, error=str(e) or type(e).__name__)
        finally:
            ai_request_duration_seconds.labels(operation=operation).observe(time.perf_counter() - start_time)

        ai_requests_total.labels(operation=operation, outcome="success" if result.success else "fallback").inc()
        return result

    @staticmethod
    def to_response(result: AIResult, key: str) -> Dict[str, Any]:
        """Shape an AIResult into the public reply, applying any fallback"""
        if result.success:
            return {"success": True, key: result.data}

        response: Dict[str, Any] = {"success": False, "error": result.error}
        provider = FALLBACK_PROVIDERS.get(key)
        if provider is not None:
            response[key] = provider()
        return response

    async def generate_smart_prompts(self, context: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.run("smart prompts", build_smart_prompts_prompt(context), _parse_prompts)
        return self.to_response(result, "prompts")

    async def analyze_mood(self, weekly_data: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.run("mood analysis", build_mood_analysis_prompt(weekly_data), _parse_object)
        return self.to_response(result, "analysis")

    async def plan_goal(self, goal: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.run("goal planning", build_goal_plan_prompt(goal), _parse_object)
        return self.to_response(result, "plan")

    async def suggest_habits(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.run("habit suggestions", build_habit_prompt(user_data), _parse_object)
        return self.to_response(result, "suggestions")

    async def generate_motivation(self, context: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.run("motivation", build_motivation_prompt(context), _parse_motivation)
        return self.to_response(result, "motivation")

    async def chat_with_ai(self, messages: List[Dict[str, str]], user_data: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.run("chat", build_chat_prompt(messages, user_data), _parse_chat)
        return self.to_response(result, "message")

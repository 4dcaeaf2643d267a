"""
Prompt templates for short-form narration scripts.
"""

# Roughly 2.5 seconds of narration per word group in the target pacing
SECONDS_PER_WORD_GROUP = 2.5

SYSTEM_INSTRUCTION = (
    "You write scripts for vertical short-form videos (TikTok, YouTube Shorts, Reels). "
    "Use natural, spoken language with energy. Image keywords must name the topic "
    "itself, not generic concepts. Reply with JSON only."
)

SCRIPT_PROMPT = """Write a short-form video script about "{topic}".

Length: {duration} seconds (about {word_count} words of narration).

Reply with exactly this JSON shape:
{{
  "hook": "attention grabber for the first 3 seconds",
  "script": "the main narration",
  "midHook": "a cliffhanger line for the middle of the video",
  "cta": "call to action for the end",
  "captions": [
    {{"text": "caption text", "startTime": 0, "duration": 3}},
    {{"text": "caption text", "startTime": 3, "duration": 3}}
  ],
  "hashtags": ["#hashtag1", "#hashtag2"],
  "keywords": ["keyword1", "keyword2"]
}}

Guidelines:
- HOOK: a question, a surprising fact or a bold command. It must stop the scroll.
- Narration: conversational, emotional, never robotic.
- MID-HOOK: add suspense so viewers keep watching.
- CTA: ask viewers to like, comment, share or follow.
- Captions: 3-5 seconds each, in order, not overlapping, covering 0 to {duration} seconds.
- Hashtags: 10-15, mixing trending and niche tags.
- Keywords: 3-6 stock-photo search terms that match "{topic}" directly
  (for "Red Handfish" use "red handfish", "handfish", "fish", not generic words).
"""


def build_script_prompt(topic: str, duration: int) -> str:
    return SCRIPT_PROMPT.format(
        topic=topic,
        duration=duration,
        word_count=int(duration / SECONDS_PER_WORD_GROUP),
    )

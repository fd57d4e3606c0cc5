"""Reply text for the agent's commands."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from voltz_agent.backend.models import Event, Match, Profile

MAX_LISTED = 5
MAX_COMMON_INTERESTS = 3

HELP_TEXT = """\
🤖 **Voltz Agent Commands**

I can help you with the following:

**Networking:**
• `matches` - View your AI-powered matches
• `profile` - Check your profile information
• `events` - See your upcoming events

**Information:**
• `help` - Show this help message

**Tips for Better Networking:**
💡 Complete your profile to get better matches
🎯 RSVP to events to meet like-minded people
💬 Reach out to your matches before the event
⭐ Build your reputation by attending events

**Need More Help?**
Visit our website or reach out to our support team.

Let me know what you'd like to do! 🚀"""

FALLBACK_TEXT = (
    "I'm your Voltz event networking assistant! 🚀\n\n"
    "I can help you with:\n"
    "• Finding your best matches\n"
    "• Event information\n"
    "• Profile updates\n"
    "• Networking tips\n\n"
    "Type 'help' to see all available commands!"
)

NO_PROFILE_TEXT = (
    "I couldn't find your profile. "
    "Make sure you've completed your profile setup in the Voltz app! 👤"
)

NO_MATCHES_TEXT = (
    "You don't have any new matches yet. "
    "Make sure to complete your profile and RSVP to events to get matched with other attendees! 🎯"
)

NO_EVENTS_TEXT = (
    "You don't have any upcoming events yet. "
    "Browse available events and RSVP to start networking! 🎉"
)

GENERIC_ERROR_TEXT = (
    "Sorry, I encountered an error processing your message. "
    "Please try again or type 'help' for assistance."
)


def fetch_error_text(resource: str) -> str:
    return f"Sorry, I couldn't fetch your {resource} right now. Please try again later."


def welcome_text(name: str | None) -> str:
    return f"""\
Hey {name or 'there'}! 👋 Welcome to Voltz!

I'm your AI-powered event networking assistant. I'm here to help you:

✨ **Find Your Best Matches**
I'll notify you about attendees with similar interests and goals

🎯 **Event Updates**
Get real-time updates about events you're attending

💡 **Networking Tips**
Get AI-powered conversation starters and connection suggestions

📊 **Track Your Network**
View your reputation and connections

**Quick Commands:**
• `matches` - See your latest matches
• `events` - View your upcoming events
• `profile` - Check your profile
• `help` - See all available commands

Let's make your next event unforgettable! 🚀"""


def format_profile(profile: Profile) -> str:
    lines = ["👤 **Your Voltz Profile**", "", f"**Name:** {profile.name or 'Not set'}"]
    if profile.title:
        lines.append(f"**Title:** {profile.title}")
    if profile.company:
        lines.append(f"**Company:** {profile.company}")
    if profile.bio:
        lines += ["", f"**Bio:** {profile.bio}"]
    if profile.interests:
        lines += ["", f"**Interests:** {', '.join(profile.interests)}"]
    if profile.goals:
        lines += ["", f"**Goals:** {', '.join(profile.goals)}"]

    stats: list[str] = []
    if profile.reputation is not None:
        stats.append(f"⭐ **Reputation:** {profile.reputation} points")
    if profile.events_attended is not None:
        stats.append(f"📅 **Events Attended:** {profile.events_attended}")
    if profile.connections_count is not None:
        stats.append(f"🤝 **Connections:** {profile.connections_count}")
    if stats:
        lines += ["", *stats]

    lines += ["", "💡 Tip: Keep your profile updated to get better matches!"]
    return "\n".join(lines)


def format_matches(matches: Sequence[Match]) -> str:
    blocks = ["🎯 **Your Top Matches**"]
    for index, match in enumerate(matches[:MAX_LISTED], start=1):
        lines = [
            f"{index}. **{match.name}** ({match.score_percent}% match)",
            f"   {match.title or 'Attendee'} at {match.company or 'N/A'}",
        ]
        if match.common_interests:
            interests = ", ".join(match.common_interests[:MAX_COMMON_INTERESTS])
            lines.append(f"   🤝 Common interests: {interests}")
        if match.conversation_starter:
            lines.append(f'   💡 Ice breaker: "{match.conversation_starter}"')
        blocks.append("\n".join(lines))
    blocks.append("Reach out and start networking! 🚀")
    return "\n\n".join(blocks)


def _format_when(start: datetime | None) -> str:
    if start is None:
        return "Date TBA"
    hour = start.hour % 12 or 12
    meridiem = "AM" if start.hour < 12 else "PM"
    return f"{start:%b} {start.day}, {start.year} at {hour}:{start.minute:02d} {meridiem}"


def format_events(events: Sequence[Event]) -> str:
    blocks = ["📅 **Your Upcoming Events**"]
    for index, event in enumerate(events[:MAX_LISTED], start=1):
        lines = [
            f"{index}. **{event.name}**",
            f"   📍 {event.location or 'Location TBA'}",
            f"   🕐 {_format_when(event.start_date)}",
        ]
        if event.attendee_count:
            lines.append(f"   👥 {event.attendee_count} attendees")
        if event.match_count:
            lines.append(f"   ✨ {event.match_count} potential matches")
        blocks.append("\n".join(lines))
    blocks.append("Get ready to network! 🚀")
    return "\n\n".join(blocks)

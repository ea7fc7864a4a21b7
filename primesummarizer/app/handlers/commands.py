from __future__ import annotations

from dataclasses import replace
from html import escape

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from ...modules.summarize.domain.models import Credentials, FormatOptions
from ...modules.summarize.services.credentials import CredentialService
from ...modules.summarize.services.preferences import PreferencesService
from ..sessions import ChatSessionRegistry

START_TEXT = (
    "📝 Send me any text and I will summarize it and pick out the key sentences.\n\n"
    "While a summary is on its way you can press Cancel, or just send new text: "
    "the older request is dropped.\n\n"
    "⚙️ /format — choose how the text is cleaned up before sending\n"
    "⚡ /live on — summarize automatically once you pause (edits count too)\n"
    "🔑 /key — store your API key, /provider — pick provider and model\n"
    "✖️ /cancel — cancel the running request"
)

HELP_TEXT = START_TEXT

FORMAT_KEYS = {
    "trim": "trim",
    "newlines": "collapse_newlines",
    "spaces": "collapse_spaces",
}
TRUE_VALUES = {"1", "on", "yes", "true"}
FALSE_VALUES = {"0", "off", "no", "false"}


def _get_command_args(command: CommandObject | None) -> str:
    if command is None or not command.args:
        return ""
    return command.args.strip()


def _parse_key_value_args(args: str) -> dict[str, str]:
    parts: dict[str, str] = {}
    for token in args.split():
        if "=" not in token:
            continue
        key, value = token.split("=", 1)
        key = key.strip().lower()
        value = value.strip()
        if key:
            parts[key] = value
    return parts


def _parse_switch(value: str) -> bool | None:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    return None


def _apply_format_args(options: FormatOptions, args: dict[str, str]) -> FormatOptions:
    """Return ``options`` updated from ``trim=on newlines=off spaces=on`` style args.

    Raises ``ValueError`` on unknown keys or values.
    """
    changes: dict[str, bool] = {}
    for key, value in args.items():
        field_name = FORMAT_KEYS.get(key)
        if field_name is None:
            raise ValueError(f"unknown option: {key}")
        flag = _parse_switch(value)
        if flag is None:
            raise ValueError(f"bad value for {key}: {value}")
        changes[field_name] = flag
    return replace(options, **changes)


def _describe_options(options: FormatOptions) -> str:
    return "\n".join(f"• {name}: {'on' if enabled else 'off'}" for name, enabled in options.as_flags().items())


def _describe_credentials(credentials: Credentials) -> str:
    # Provider and model come straight from user input.
    provider = escape(credentials.provider or "not set")
    model = escape(credentials.model or "not set")
    return f"Provider: {provider}\nModel: {model}"


def _format_error_text(exc: ValueError) -> str:
    return f"Could not update formatting: {escape(str(exc))}"


def create_commands_router(
    sessions: ChatSessionRegistry,
    preferences: PreferencesService,
    credentials: CredentialService,
) -> Router:
    router = Router(name="commands")

    @router.message(Command("start"))
    async def start(message: Message) -> None:
        await message.answer(START_TEXT)

    @router.message(Command("help"))
    async def help_cmd(message: Message) -> None:
        await message.answer(HELP_TEXT)

    @router.message(Command("format"))
    async def format_cmd(message: Message, command: CommandObject) -> None:
        user_id = message.from_user.id if message.from_user else message.chat.id
        current = await preferences.get(user_id)
        args = _get_command_args(command)
        if not args:
            await message.answer(
                "Current formatting:\n"
                f"{_describe_options(current.options)}\n\n"
                "Change it like this: /format trim=on newlines=off spaces=on"
            )
            return
        parsed = _parse_key_value_args(args)
        if not parsed:
            await message.answer("Use the format: /format trim=on newlines=off spaces=on")
            return
        try:
            options = _apply_format_args(current.options, parsed)
        except ValueError as exc:
            await message.answer(_format_error_text(exc))
            return
        await preferences.update_options(user_id, options)
        await message.answer("Done! Formatting updated:\n" + _describe_options(options))

    @router.message(Command("live"))
    async def live_cmd(message: Message, command: CommandObject) -> None:
        user_id = message.from_user.id if message.from_user else message.chat.id
        args = _get_command_args(command)
        current = await preferences.get(user_id)
        if not args:
            state = "on" if current.live_mode else "off"
            await message.answer(f"Live mode is {state}. Use /live on or /live off.")
            return
        flag = _parse_switch(args.split()[0])
        if flag is None:
            await message.answer("Use /live on or /live off.")
            return
        await preferences.set_live_mode(user_id, flag)
        if flag:
            await message.answer("Live mode on: I will summarize once you stop typing for a moment.")
        else:
            await message.answer("Live mode off: every message is summarized right away.")

    @router.message(Command("key"))
    async def key_cmd(message: Message, command: CommandObject) -> None:
        user_id = message.from_user.id if message.from_user else message.chat.id
        args = _get_command_args(command)
        if not args:
            stored = await credentials.get(user_id)
            state = "stored" if stored.api_key else "not set"
            await message.answer(f"API key: {state}.\nUse /key YOUR_KEY to store one or /key clear to remove it.")
            return
        if args.lower() == "clear":
            await credentials.clear(user_id)
            await message.answer("API key removed.")
            return
        await credentials.set_api_key(user_id, args.split()[0])
        await message.answer("API key saved.")

    @router.message(Command("provider"))
    async def provider_cmd(message: Message, command: CommandObject) -> None:
        user_id = message.from_user.id if message.from_user else message.chat.id
        tokens = _get_command_args(command).split()
        if not tokens:
            stored = await credentials.get(user_id)
            await message.answer(_describe_credentials(stored) + "\n\nUse /provider NAME [MODEL]")
            return
        model = tokens[1] if len(tokens) > 1 else None
        updated = await credentials.set_provider(user_id, tokens[0], model)
        await message.answer("Saved.\n" + _describe_credentials(updated))

    @router.message(Command("cancel"))
    async def cancel_cmd(message: Message) -> None:
        session = sessions.find(message.chat.id)
        if session is None or not await session.cancel():
            await message.answer("Nothing to cancel.")

    return router

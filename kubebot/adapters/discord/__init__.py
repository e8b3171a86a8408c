from kubebot.adapters.discord.adapter import DiscordGatewayClient, DiscordReplySink

__all__ = ["DiscordGatewayClient", "DiscordReplySink"]

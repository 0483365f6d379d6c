from fastapi import Request

from tictac_promo.services.player_link import PlayerLinkService
from tictac_promo.services.promo_issuance import PromoIssuanceCoordinator


def get_coordinator(request: Request) -> PromoIssuanceCoordinator:
    return request.app.state.coordinator


def get_link_service(request: Request) -> PlayerLinkService:
    return request.app.state.link_service


def get_bot_username(request: Request) -> str:
    return request.app.state.bot_username

"""Confirmation message generators.

The LLM generator is used when an OpenAI-compatible endpoint is
configured; otherwise the offline template renders the confirmation so
an order can always be completed.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import aiohttp

from dk2bot.config import Settings
from dk2bot.models import OrderDetails
from dk2bot.scheduling import format_pickup_datetime

logger = logging.getLogger(__name__)

FAKE_TRACKING_NUMBER = "FAKE-TRK-123456789"

CHANNELS_NOTICE = "Une confirmation par SMS et par e-mail vous a également été envoyée."

SYSTEM_PROMPT = (
    "Vous êtes un assistant intelligent pour une entreprise de transport "
    "industriel nommée \"Livraison DK2\". Répondez en français."
)


class GenerationError(Exception):
    """The confirmation message could not be generated."""


class ConfirmationGenerator(ABC):
    name: str = ""

    @abstractmethod
    async def generate(self, order: OrderDetails) -> str:
        """Return the customer-facing confirmation message for *order*."""


def build_prompt(order: OrderDetails) -> str:
    parcel = order.parcel
    customer = order.customer
    return (
        "Un client vient de soumettre une nouvelle commande de livraison de colis.\n"
        "Votre tâche est de générer un message de confirmation amical et "
        "professionnel en français.\n\n"
        "Le message doit :\n"
        "1. Remercier le client par son nom.\n"
        "2. Résumer brièvement les détails clés de la commande "
        "(ramassage, livraison, heure prévue).\n"
        "3. Fournir un numéro de suivi fictif et unique au format 'DK2-XXXX-XXXX'.\n"
        "4. Confirmer qu'il sera averti par téléphone pour le ramassage.\n"
        f"5. Mentionner que {CHANNELS_NOTICE}\n"
        "6. Si des instructions spéciales de manutention sont fournies, les faire "
        "ressortir clairement dans une section dédiée intitulée "
        "\"**Instructions Spéciales de Manutention**\". Le contenu des "
        "instructions doit être mis en évidence (par exemple, en italique ou dans "
        "un bloc de citation). Ne pas inclure cette section si aucune instruction "
        "n'est fournie.\n"
        "7. Être formaté en Markdown pour l'affichage.\n\n"
        "Voici les détails de la commande :\n"
        f"- Nom du client : {customer.name}\n"
        f"- Téléphone du client : {customer.phone}\n"
        f"- E-mail du client : {customer.email or 'Non fourni'}\n"
        f"- Adresse de ramassage : {order.pickup_address.one_line()}\n"
        f"- Adresse de livraison : {order.delivery_address.one_line()}\n"
        f"- Date et heure de ramassage : {format_pickup_datetime(order.pickup_datetime)}\n"
        f"- Poids du colis : {parcel.weight} kg\n"
        f"- Dimensions du colis : {parcel.length}x{parcel.width}x{parcel.height} cm\n"
        f"- Contenu du colis : {parcel.contents}\n"
        f"- Catégorie du colis : {parcel.category.value}\n"
        f"- Instructions spéciales : {parcel.special_instructions or 'Aucune'}\n\n"
        "Générez le message de confirmation maintenant."
    )


class LLMConfirmationGenerator(ConfirmationGenerator):
    """Chat-completions call to an OpenAI-compatible API."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        base_url: str,
        timeout: float = 20,
        max_tokens: int = 800,
        temperature: float = 0.4,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate(self, order: OrderDetails) -> str:
        url = f"{self.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(order)},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, headers=headers, json=payload) as resp:
                    if resp.status >= 400:
                        body = await resp.text()
                        logger.warning("OpenAI error %s: %s", resp.status, body[:500])
                        raise GenerationError(_failure(f"HTTP {resp.status} {body[:200]}"))
                    data = await resp.json()
        except GenerationError:
            raise
        except Exception as exc:
            logger.error("Error generating confirmation message: %s", exc)
            raise GenerationError(_failure(str(exc) or type(exc).__name__)) from exc

        try:
            text = (data["choices"][0]["message"]["content"] or "").strip()
        except (KeyError, IndexError, TypeError) as exc:
            logger.warning("Unexpected OpenAI response shape: %s", str(data)[:500])
            raise GenerationError(_failure("réponse inattendue du service")) from exc
        if not text:
            raise GenerationError(_failure("réponse vide du service"))
        return text


def _failure(cause: str) -> str:
    return "L'assistant IA n'a pas pu générer de confirmation. Cause : " + cause


class TemplateConfirmationGenerator(ConfirmationGenerator):
    """Offline confirmation, used when no LLM is configured."""

    name = "template"

    async def generate(self, order: OrderDetails) -> str:
        return render_template(order)


def render_template(order: OrderDetails) -> str:
    parcel = order.parcel
    customer = order.customer
    instructions = ""
    if parcel.special_instructions:
        instructions = (
            "\n\n**Instructions Spéciales de Manutention:**\n"
            f"*{parcel.special_instructions}*"
        )
    return (
        "**Commande Reçue !**\n\n"
        f"Merci, {customer.name}. Votre commande de transport avec Livraison DK2 "
        "a été passée avec succès.\n\n"
        "**Résumé :**\n"
        f"- **Ramassage :** {order.pickup_address.one_line()}\n"
        f"- **Livraison :** {order.delivery_address.one_line()}\n"
        f"- **Prévu pour le :** {format_pickup_datetime(order.pickup_datetime)}\n"
        f"- **Contenu du colis :** {parcel.contents} ({parcel.category.value})"
        f"{instructions}\n\n"
        f"**Votre numéro de suivi est : {FAKE_TRACKING_NUMBER}.**\n\n"
        f"Nous vous informerons par téléphone au {customer.phone} lorsque notre "
        f"chauffeur sera en route. {CHANNELS_NOTICE} "
        "Nous vous remercions de votre confiance !\n\n"
        "*(Ceci est une confirmation simulée car la clé API n'est pas disponible.)*"
    )


def build_generator(settings: Settings) -> ConfirmationGenerator:
    """Pick the generator once, at startup."""
    if settings.llm_configured:
        logger.info("Confirmation messages: %s (%s)", LLMConfirmationGenerator.name, settings.OPENAI_MODEL)
        return LLMConfirmationGenerator(
            settings.OPENAI_API_KEY or "",
            model=settings.OPENAI_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
            max_tokens=settings.OPENAI_MAX_TOKENS,
            temperature=settings.OPENAI_TEMPERATURE,
        )
    logger.info("Confirmation messages: offline template (no LLM configured)")
    return TemplateConfirmationGenerator()

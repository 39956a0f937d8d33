"""Flashcard deck, card and review routes."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from db_stores import FlashcardDeckStoreDB, FlashcardStoreDB
from helpers import check_owner, current_user_id, json_abort, parse_body
from schemas import DeckCreate, DeckUpdate, FlashcardCreate, FlashcardReview, FlashcardUpdate

bp = Blueprint("flashcards", __name__)


def _owned_deck(deck_id: int, action: str = "access"):
    return check_owner(FlashcardDeckStoreDB.get(deck_id), "Flashcard deck", action)


def _owned_card(card_id: int, action: str = "access"):
    """A card is owned through its deck."""
    card = FlashcardStoreDB.get(card_id)
    if card is None:
        json_abort(404, "Flashcard not found")
    _owned_deck(card.deck_id, action)
    return card


# ── Decks ─────────────────────────────────────────────────

@bp.route("/api/flashcard-decks")
@login_required
def list_decks():
    return jsonify([d.to_dict() for d in FlashcardDeckStoreDB.list_for_user(current_user_id())])


@bp.route("/api/flashcard-decks/<int:deck_id>")
@login_required
def get_deck(deck_id):
    return jsonify(_owned_deck(deck_id).to_dict())


@bp.route("/api/flashcard-decks", methods=["POST"])
@login_required
def create_deck():
    body = parse_body(DeckCreate, "flashcard deck")
    deck = FlashcardDeckStoreDB.create(current_user_id(), body.model_dump())
    return jsonify(deck.to_dict()), 201


@bp.route("/api/flashcard-decks/<int:deck_id>", methods=["PUT"])
@login_required
def update_deck(deck_id):
    _owned_deck(deck_id, "update")
    body = parse_body(DeckUpdate, "flashcard deck")
    return jsonify(FlashcardDeckStoreDB.update(deck_id, body.changes()).to_dict())


@bp.route("/api/flashcard-decks/<int:deck_id>", methods=["DELETE"])
@login_required
def delete_deck(deck_id):
    _owned_deck(deck_id, "delete")
    FlashcardDeckStoreDB.delete(deck_id)
    return "", 204


# ── Cards ─────────────────────────────────────────────────

@bp.route("/api/flashcard-decks/<int:deck_id>/flashcards")
@login_required
def list_cards(deck_id):
    _owned_deck(deck_id)
    return jsonify([c.to_dict() for c in FlashcardStoreDB.list_for_deck(deck_id)])


@bp.route("/api/flashcard-decks/<int:deck_id>/flashcards/due")
@login_required
def due_cards(deck_id):
    _owned_deck(deck_id)
    return jsonify([c.to_dict() for c in FlashcardStoreDB.due_for_deck(deck_id)])


@bp.route("/api/flashcard-decks/<int:deck_id>/flashcards", methods=["POST"])
@login_required
def create_card(deck_id):
    _owned_deck(deck_id, "add flashcards to")
    body = parse_body(FlashcardCreate, "flashcard")
    card = FlashcardStoreDB.create(deck_id, body.model_dump())
    return jsonify(card.to_dict()), 201


@bp.route("/api/flashcards/<int:card_id>", methods=["PUT"])
@login_required
def update_card(card_id):
    _owned_card(card_id, "update")
    body = parse_body(FlashcardUpdate, "flashcard")
    return jsonify(FlashcardStoreDB.update(card_id, body.changes()).to_dict())


@bp.route("/api/flashcards/<int:card_id>", methods=["DELETE"])
@login_required
def delete_card(card_id):
    _owned_card(card_id, "delete")
    FlashcardStoreDB.delete(card_id)
    return "", 204


@bp.route("/api/flashcards/<int:card_id>/review", methods=["POST"])
@login_required
def review_card(card_id):
    _owned_card(card_id, "review")
    body = parse_body(FlashcardReview, "review")
    card = FlashcardStoreDB.review(card_id, body.correct)
    return jsonify(card.to_dict())

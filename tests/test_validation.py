"""Tests for validation and name normalization."""

import base64
from decimal import Decimal

import pytest

from cestas.core.images import validate_image_url
from cestas.core.text import normalize_name, sanitize_table_name
from cestas.exceptions import ConflictException, ValidationException
from cestas.modules.tables.schemas import ProdutoInput
from cestas.modules.tables.validation import (
    is_duplicate_name,
    parse_money,
    validate_card_name,
    validate_produto,
)

PNG_URL = "data:image/png;base64," + base64.b64encode(b"\x89PNG\r\n\x1a\n").decode()

CARDS = [
    {"id": "1", "name": "Café"},
    {"id": "2", "name": "Limpeza"},
]


class TestNormalizeName:
    def test_case_accents_and_spaces(self):
        assert normalize_name("  Café ") == "cafe"
        assert normalize_name("AÇÚCAR") == "acucar"

    def test_none(self):
        assert normalize_name(None) == ""


class TestDuplicateNames:
    @pytest.mark.parametrize("name", ["cafe", "CAFÉ", "Cafe ", " café"])
    def test_equivalent_names_are_duplicates(self, name):
        assert is_duplicate_name(name, CARDS) is True

    def test_different_name_is_not_duplicate(self):
        assert is_duplicate_name("Cafeteria", CARDS) is False

    def test_excluded_card_is_ignored(self):
        assert is_duplicate_name("cafe", CARDS, exclude_id="1") is False
        assert is_duplicate_name("cafe", CARDS, exclude_id=2) is True

    def test_validate_card_name_conflict(self):
        with pytest.raises(ConflictException) as exc_info:
            validate_card_name("Cafe", CARDS)
        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "Já existe um card com esse nome"

    def test_validate_card_name_trims(self):
        assert validate_card_name("  Feira  ", CARDS) == "Feira"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_validate_card_name_required(self, name):
        with pytest.raises(ValidationException):
            validate_card_name(name, CARDS)


class TestParseMoney:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (10, Decimal("10")),
            (25.5, Decimal("25.5")),
            ("3.49", Decimal("3.49")),
            ("3,49", Decimal("3.49")),
            (" 7 ", Decimal("7")),
            (0, Decimal("0")),
        ],
    )
    def test_accepted(self, value, expected):
        assert parse_money(value, "Frete") == expected

    @pytest.mark.parametrize("value", ["abc", "", None, True, "nan", "inf", -1, "-0.01"])
    def test_rejected(self, value):
        with pytest.raises(ValidationException):
            parse_money(value, "Frete")

    def test_negative_message(self):
        with pytest.raises(ValidationException) as exc_info:
            parse_money(-5, "Frete")
        assert exc_info.value.message == "Frete não pode ser negativo"

    def test_zero_rejected_when_not_allowed(self):
        with pytest.raises(ValidationException):
            parse_money(0, "Preço", allow_zero=False)


class TestValidateProduto:
    def test_valid_input_is_normalized(self):
        data = validate_produto(ProdutoInput(nome="  Feijão ", preco="8,90", importancia="Essencial"))
        assert data.nome == "Feijão"
        assert data.preco == Decimal("8.90")
        assert data.importancia == "Essencial"

    @pytest.mark.parametrize("preco", [0, -5, "abc", None, ""])
    def test_bad_price(self, preco):
        with pytest.raises(ValidationException) as exc_info:
            validate_produto(ProdutoInput(nome="Arroz", preco=preco))
        assert exc_info.value.message == "Preço deve ser maior que zero"

    @pytest.mark.parametrize("nome", ["", "   ", None])
    def test_empty_name(self, nome):
        with pytest.raises(ValidationException) as exc_info:
            validate_produto(ProdutoInput(nome=nome, preco=10))
        assert exc_info.value.message == "Nome do produto é obrigatório"

    def test_unknown_importance(self):
        with pytest.raises(ValidationException):
            validate_produto(ProdutoInput(nome="Arroz", preco=10, importancia="Urgente"))

    def test_image_data_url_kept(self):
        data = validate_produto(ProdutoInput(nome="Arroz", preco=10, imagem=PNG_URL))
        assert data.imagem == PNG_URL

    @pytest.mark.parametrize(
        "imagem",
        [
            "data:application/pdf;base64,JVBERg==",
            "data:image/png,rawbytes",
            "data:image/png;base64,***",
            "C:\\fotos\\arroz.png",
        ],
    )
    def test_bad_image_rejected(self, imagem):
        with pytest.raises(ValidationException):
            validate_produto(ProdutoInput(nome="Arroz", preco=10, imagem=imagem))

    def test_image_over_limit_rejected(self):
        big = "data:image/jpeg;base64," + base64.b64encode(b"x" * 101).decode()
        with pytest.raises(ValidationException, match="no máximo"):
            validate_produto(ProdutoInput(nome="Arroz", preco=10, imagem=big), max_image_bytes=100)


class TestValidateImageUrl:
    def test_blank_is_none(self):
        assert validate_image_url("  ", 100) is None
        assert validate_image_url(None, 100) is None

    def test_http_url_kept(self):
        assert validate_image_url("https://cdn.example.com/a.png", 100) == "https://cdn.example.com/a.png"

    def test_size_counts_decoded_bytes(self):
        url = "data:image/png;base64," + base64.b64encode(b"x" * 100).decode()
        assert validate_image_url(url, 100) == url


class TestSanitizeTableName:
    def test_accents_and_symbols(self):
        assert sanitize_table_name("Minha Lista de Café!") == "tabela_minha_lista_de_cafe"

    def test_collapses_and_trims_underscores(self):
        assert sanitize_table_name("  --Cesta   Básica--  ") == "tabela_cesta_basica"

    def test_truncated_to_55_chars_after_prefix(self):
        name = sanitize_table_name("a" * 80)
        assert name == "tabela_" + "a" * 55

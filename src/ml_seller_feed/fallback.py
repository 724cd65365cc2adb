"""Static sample catalog served when the live marketplace path is unusable."""

from __future__ import annotations

from .formatters import discount_label, format_price
from .models import Product

_STORE_URL = "https://www.mercadolivre.com.br"
_IMAGE_BASE = "https://http2.mlstatic.com/D_NQ_NP_2X_{}-F.webp"

# (title, description, image id, price, old price, stock, sold, free shipping, category)
_CATALOG = (
    (
        "Mouse Gamer Sem Fio RGB 16000DPI",
        "Mouse gamer sem fio com iluminação RGB, 6 botões programáveis e sensor óptico de alta precisão",
        "787972-MLB76058379480_052024", 89.90, 129.90, 15, 42, True, "Periféricos",
    ),
    (
        "Teclado Mecânico Gamer RGB Switch Outemu",
        "Teclado mecânico gamer com switches Outemu Blue, iluminação RGB personalizável e construção em ABS",
        "798104-MLB77068584739_072024", 199.90, 299.90, 8, 31, True, "Periféricos",
    ),
    (
        "Headset Gamer 7.1 Surround Sound",
        "Headset gamer com som surround virtual 7.1, microfone com cancelamento de ruído e almofadas memory foam",
        "977033-MLB77392111353_082024", 159.90, 229.90, 12, 28, False, "Áudio",
    ),
    (
        "Monitor Gamer 24'' 144Hz 1ms",
        "Monitor gamer Full HD 24 polegadas, taxa de atualização 144Hz, tempo de resposta 1ms e painel VA",
        "814845-MLA74159063908_012024", 899.90, 1199.90, 5, 17, True, "Monitores",
    ),
)


def _build(position: int, row: tuple) -> Product:
    title, description, image_id, price, old_price, stock, sold, free_shipping, category = row
    return Product(
        id=f"fallback-{position}",
        title=title,
        description=description,
        image_url=_IMAGE_BASE.format(image_id),
        price=format_price(price),
        old_price=format_price(old_price),
        discount_label=discount_label(price, old_price),
        permalink=_STORE_URL,
        condition="Novo",
        available_quantity=stock,
        sold_quantity=sold,
        free_shipping=free_shipping,
        accepts_payment_platform=True,
        category_label=category,
        position=position,
    )


FALLBACK_PRODUCTS: tuple[Product, ...] = tuple(
    _build(position, row) for position, row in enumerate(_CATALOG, start=1)
)


def fallback_products() -> tuple[Product, ...]:
    """Return the four fixed sample products, ids ``fallback-1``..``fallback-4``."""
    return FALLBACK_PRODUCTS

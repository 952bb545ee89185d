"""Centralised locator cascades for the Weather Shopper storefront."""

from weathershopper.models import LocatorSpec, Strategy

PRICE_LABEL = "Price"

# ==== HOME ====
TEMPERATURE = LocatorSpec(
    "temperature",
    (Strategy("id", "#temperature", unique=True),),
)
BUY_MOISTURIZERS = LocatorSpec(
    "buy-moisturizers",
    (
        Strategy("text", "xpath=//button[contains(text(),'Buy moisturizers')]"),
        Strategy("href", "a[href*='moisturizer'] button, button[onclick*='moisturizer']"),
    ),
)
BUY_SUNSCREENS = LocatorSpec(
    "buy-sunscreens",
    (
        Strategy("text", "xpath=//button[contains(text(),'Buy sunscreens')]"),
        Strategy("href", "a[href*='sunscreen'] button, button[onclick*='sunscreen']"),
    ),
)

# ==== CATEGORY (product grid) ====
MOISTURIZERS_HEADING = LocatorSpec(
    "moisturizers-heading",
    (Strategy("text", "xpath=//h2[contains(text(),'Moisturizers')]"),),
)
SUNSCREENS_HEADING = LocatorSpec(
    "sunscreens-heading",
    (Strategy("text", "xpath=//h2[contains(text(),'Sunscreens')]"),),
)
ADD_BUTTON_XPATH = "xpath=//button[contains(text(),'Add')]"
PRODUCT_CARDS = LocatorSpec(
    "product-cards",
    (
        Strategy("add-parent", f"{ADD_BUTTON_XPATH}/parent::*"),
        Strategy("add-buttons", ADD_BUTTON_XPATH),
    ),
)
# The "add-buttons" strategy yields buttons; the scanner walks to their parent.
PARENT = "xpath=.."

PRODUCT_NAME_EXACT = LocatorSpec(
    "product-name-exact",
    (Strategy("exact-class", "xpath=.//p[@class='font-weight-bold top-space-10']"),),
)
PRODUCT_NAME_PARTIAL = LocatorSpec(
    "product-name-partial",
    (Strategy("partial-class", "xpath=.//p[contains(@class,'font-weight-bold')]"),),
)
PRODUCT_PARAGRAPHS = "xpath=.//p"
PRODUCT_PRICE = LocatorSpec(
    "product-price",
    (Strategy("price-text", "xpath=.//p[contains(text(),'Price:')]"),),
)
PRODUCT_ADD = LocatorSpec(
    "product-add",
    (Strategy("text", "xpath=.//button[contains(text(),'Add')]"),),
)
CART_BADGE = LocatorSpec(
    "cart-badge",
    (Strategy("id", "#cart", unique=True),),
)
CART_BUTTON = LocatorSpec(
    "cart-button",
    (
        Strategy("onclick", "xpath=//button[@onclick='goToCart()']"),
        Strategy("text", "xpath=//button[contains(.,'Cart')]"),
    ),
)

# ==== CART ====
CART_HEADING = LocatorSpec(
    "cart-heading",
    (Strategy("text", "xpath=//h2[contains(text(),'Checkout')]"),),
)
CART_ROWS = LocatorSpec(
    "cart-rows",
    (
        Strategy("striped-table", "xpath=//table[@class='table table-striped']//tbody//tr"),
        Strategy("any-table", "table tbody tr"),
    ),
)
CART_CELLS = "xpath=.//td"
CART_TOTAL = LocatorSpec(
    "cart-total",
    (Strategy("id", "#total", unique=True),),
)
PAY_WITH_CARD = LocatorSpec(
    "pay-with-card",
    (
        Strategy("text", "xpath=//button[contains(text(),'Pay with Card')]"),
        Strategy("stripe-class", "xpath=//button[@class='stripe-button-el']"),
        Strategy("partial-class", "xpath=//button[contains(@class,'stripe')]"),
        Strategy("label-parent", "xpath=//span[contains(text(),'Pay with Card')]/parent::button"),
    ),
)

# ==== PAYMENT (inside the Stripe iframe) ====
PAYMENT_FRAME = LocatorSpec(
    "payment-frame",
    (
        Strategy("name", "xpath=//iframe[contains(@name,'stripe_checkout')]"),
        Strategy("css-name", "iframe[name*='stripe']"),
    ),
)
EMAIL_FIELD = LocatorSpec(
    "email",
    (
        Strategy("id", "#email"),
        Strategy("type", "xpath=//input[@type='email']"),
        Strategy(
            "placeholder",
            "xpath=//input[contains(@placeholder,'Email') or contains(@placeholder,'email')]",
        ),
    ),
)
CARD_NUMBER_FIELD = LocatorSpec(
    "card-number",
    (Strategy("placeholder", "xpath=//input[@placeholder='Card number']"),),
)
EXPIRY_FIELD = LocatorSpec(
    "expiry",
    (Strategy("placeholder", "xpath=//input[@placeholder='MM / YY']"),),
)
CVC_FIELD = LocatorSpec(
    "cvc",
    (Strategy("placeholder", "xpath=//input[@placeholder='CVC']"),),
)
POSTAL_CODE_FIELD = LocatorSpec(
    "postal-code",
    (Strategy("placeholder", "xpath=//input[@placeholder='ZIP Code']"),),
)
SUBMIT_BUTTON = LocatorSpec(
    "payment-submit",
    (
        Strategy("submit-role", "xpath=//button[@type='submit']"),
        Strategy("id", "#submitButton"),
    ),
)

# ==== CONFIRMATION ====
SUCCESS_HEADING_TEXT = "PAYMENT SUCCESS"
SUCCESS_BODY_TEXT = "Your payment was successful"
SUCCESS_HEADING = LocatorSpec(
    "success-heading",
    (Strategy("text", f"xpath=//*[contains(text(),'{SUCCESS_HEADING_TEXT}')]"),),
)
SUCCESS_BODY = LocatorSpec(
    "success-body",
    (Strategy("text", f"xpath=//*[contains(text(),'{SUCCESS_BODY_TEXT}')]"),),
)

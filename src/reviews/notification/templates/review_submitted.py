"""Review submitted template — sent to the author when a review enters moderation."""


class ReviewSubmittedTemplate:
    name = "review_submitted"

    @staticmethod
    def render(context: dict) -> dict:
        user_name = context.get("user_name") or "there"
        product_name = context.get("product_name", "the product")
        return {
            "subject": "Thank you for your review!",
            "body": (
                f"Hi {user_name},\n\n"
                f"Thanks for reviewing {product_name}. Here's what you wrote:\n\n"
                f"{context.get('review_content', '')}\n\n"
                "Our moderators will check it shortly. We'll let you know as "
                "soon as it is published.\n\n"
                "The Storefront Team"
            ),
        }

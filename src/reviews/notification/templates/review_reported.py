"""Review reported template — sent to the operations mailbox when a review is flagged."""


class ReviewReportedTemplate:
    name = "review_reported"

    @staticmethod
    def render(context: dict) -> dict:
        reason = context.get("report_reason") or "No reason given"
        return {
            "subject": "Review report received",
            "body": (
                f"Review {context.get('review_id', '')} of "
                f"{context.get('product_name', 'a product')} by "
                f"{context.get('user_name') or 'an unknown author'} was reported.\n\n"
                f"Reason: {reason}\n\n"
                "Review content:\n"
                f"{context.get('review_content', '')}\n\n"
                "Please check it in the moderation console."
            ),
        }

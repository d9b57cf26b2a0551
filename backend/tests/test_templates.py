from doc_chaser.services import templates


class TestClientTemplates:
    def test_sms_with_link(self):
        text = templates.client_sms("Maria Lopez Garcia", "Tax Return", "https://d.example/upload/t")
        assert text == "Hi Maria! Please upload your Tax Return: https://d.example/upload/t"

    def test_sms_without_link_points_to_email(self):
        text = templates.client_sms("Maria", "Tax Return", "")
        assert "Check your email for the upload link" in text

    def test_email_without_link_uses_placeholder(self):
        email = templates.client_email("Maria", "Tax Return", None)
        assert email.subject == "Action Needed: Tax Return"
        assert "[link not available]" in email.body


class TestReminderTemplates:
    def test_regular_and_urgent_sms_differ(self):
        regular = templates.reminder_sms("Ann", "Pay Stub", "https://l", is_urgent=False)
        urgent = templates.reminder_sms("Ann", "Pay Stub", "https://l", is_urgent=True)
        assert "Friendly reminder" in regular
        assert "Quick reminder" in urgent

    def test_sms_placeholder(self):
        assert templates.reminder_sms("Ann", "Pay Stub", None).endswith("Upload here: [link]")

    def test_email_subjects(self):
        assert templates.reminder_email("Ann", "Pay Stub", "https://l").subject == \
            "Friendly Reminder: Pay Stub still needed"
        urgent = templates.reminder_email("Ann", "Pay Stub", "https://l", is_urgent=True)
        assert urgent.subject == "Time Sensitive: Pay Stub still needed"
        assert "deadline for your document is coming up soon" in urgent.body

    def test_blank_name_still_produces_text(self):
        assert templates.reminder_sms("  ", "Pay Stub", "https://l").startswith("Hi there!")


class TestBrokerTemplates:
    def test_completion(self):
        assert templates.broker_sms("Ann Lee", "Pay Stub") == "Document uploaded! Ann Lee submitted their Pay Stub."
        email = templates.broker_email("Ann Lee", "Pay Stub", "https://d.example/tracker")
        assert email.subject == "Document Received: Pay Stub from Ann Lee"
        assert "View all requests: https://d.example/tracker" in email.body

    def test_expiry(self):
        assert templates.expiry_sms("Ann Lee", "Pay Stub") == \
            "Request expired: Ann Lee's Pay Stub was not uploaded by deadline."
        assert templates.expiry_email("Ann Lee", "Pay Stub").subject == "Request Expired: Pay Stub"

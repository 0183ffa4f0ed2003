import secrets

from flask import Blueprint, request, render_template_string, current_app, g

pay_pages_bp = Blueprint("pay_pages", __name__)

# The overlay script is injected at most once per page (guarded on
# window.Razorpay); every attempt reuses it.
CHECKOUT_PAGE = """
<!doctype html>
<html>
  <head><title>Membership Checkout</title></head>
  <body style="font-family: system-ui; max-width: 720px; margin: 40px auto;">
    <h1>Executive Membership</h1>
    <p id="status">Preparing secure checkout&hellip;</p>
    <button id="pay" style="padding: 12px 18px; background: #0ea5e9; color: white; border: 0; border-radius: 8px; font-weight: 600;">Pay now</button>
    <script nonce="{{ nonce }}">
      (function () {
        var params = {{ params|tojson }};
        var statusEl = document.getElementById("status");

        function loadCheckoutScript() {
          return new Promise(function (resolve) {
            if (window.Razorpay) { resolve(true); return; }
            var existing = document.getElementById("razorpay-checkout-js");
            if (existing) {
              existing.addEventListener("load", function () { resolve(true); });
              existing.addEventListener("error", function () { resolve(false); });
              return;
            }
            var script = document.createElement("script");
            script.id = "razorpay-checkout-js";
            script.src = params.scriptUrl;
            script.async = true;
            script.crossOrigin = "anonymous";
            script.onload = function () { resolve(true); };
            script.onerror = function () { resolve(false); };
            document.body.appendChild(script);
          });
        }

        function postJson(url, body) {
          return fetch(url, {
            method: "POST",
            headers: {"Content-Type": "application/json"},
            body: JSON.stringify(body)
          }).then(function (resp) {
            return resp.json().then(function (data) { return {ok: resp.ok, data: data}; });
          });
        }

        function pay() {
          loadCheckoutScript().then(function (loaded) {
            if (!loaded) { throw new Error("Failed to load payment gateway"); }
            return postJson("/checkout", {userId: params.userId, planId: params.planId});
          }).then(function (result) {
            if (!result.ok) { throw new Error(result.data.error || "Failed to create order"); }
            var options = result.data;
            options.handler = function (response) {
              postJson("/verify-payment", {
                razorpay_order_id: response.razorpay_order_id,
                razorpay_payment_id: response.razorpay_payment_id,
                razorpay_signature: response.razorpay_signature
              }).then(function (check) {
                statusEl.textContent = check.ok && check.data.verified
                  ? "Payment successful! Your membership will be active shortly."
                  : "Payment verification failed. If you were charged, contact us.";
              });
            };
            options.modal = {ondismiss: function () { statusEl.textContent = "Payment cancelled by user"; }};
            new window.Razorpay(options).open();
            statusEl.textContent = "Complete the payment in the Razorpay window.";
          }).catch(function (err) {
            statusEl.textContent = err.message || "Something went wrong. Please try again.";
          });
        }

        document.getElementById("pay").addEventListener("click", pay);
        loadCheckoutScript().then(function (loaded) {
          statusEl.textContent = loaded ? "Ready." : "Failed to load payment gateway";
        });
      })();
    </script>
  </body>
</html>
"""


@pay_pages_bp.get("/pay/checkout")
def checkout_page():
    user_id = request.args.get("userId", "")
    plan_id = request.args.get("planId", "one-year")

    g.csp_nonce = secrets.token_urlsafe(16)
    params = {
        "userId": user_id,
        "planId": plan_id,
        "scriptUrl": current_app.config.get("RAZORPAY_CHECKOUT_SCRIPT"),
    }
    return render_template_string(CHECKOUT_PAGE, params=params, nonce=g.csp_nonce), 200

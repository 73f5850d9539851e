"""
Example showing a storefront route table built from installed packages.
"""

from __future__ import annotations

from shoproute import MemoryConfigStore, Router, init_package_routes


class PrintRenderer:
    def render(self, layout, structure=None):
        print(f"render {layout}: {structure}")


class RoleAuthority:
    def __init__(self, grants):
        self.grants = grants

    def has_permission(self, route_name, principal_id):
        return route_name in self.grants.get(principal_id, ())


session = {"user": "guest"}

store = MemoryConfigStore(
    "shop-1",
    packages=[
        {"name": "tags", "registry": [{"route": "/tags", "template": "tagGrid"}]},
        {
            "name": "orders",
            "registry": [
                {"route": "/orders/:_id?", "name": "dashboard/orders", "template": "orders"},
                {"provides": "dashboard", "label": "Orders"},
            ],
        },
    ],
    shops=[
        {
            "_id": "shop-1",
            "name": "Acme",
            "layout": [
                {
                    "layout": "coreLayout",
                    "workflow": "coreWorkflow",
                    "enabled": True,
                    "structure": {"template": "products", "layoutHeader": "layoutHeader"},
                }
            ],
        }
    ],
)

router = Router(name="storefront").plug("logging", flags="print:on")
router.plug(
    "permission",
    authority=RoleAuthority({"guest": {"index", "tags/tagGrid"}, "admin": {"dashboard/orders"}}),
    principal=lambda: session["user"],
)


if __name__ == "__main__":
    report = init_package_routes(router, store, renderer=PrintRenderer())
    print("installed:", [entry.full_path for entry in report.installed])
    print("skipped:", [skip.reason for skip in report.skipped])

    router.go("/")
    router.go("/acme/tags")
    router.go("/acme/orders/42")  # guest: rendered with the unauthorized slot
    session["user"] = "admin"
    router.reload()
    router.go("/acme/nowhere")

    # admin edits the shop layout: the current page re-renders
    store.update_shop("shop-1", name="Acme Corp")

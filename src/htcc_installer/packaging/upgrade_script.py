"""
In-package cross-scope upgrade detection.

``actions.upgrade.find_all_related_products`` needs Python, which the MSI
cannot host in an immediate action. The same lookup is embedded in the
package as an inline JScript custom action, so a plain ``msiexec /i`` (or a
double-click) still finds a release installed in the other scope. The
action runner's ``install`` command remains the scriptable route.

The script lands in the Formatted ``Target`` column, so it must not contain
square brackets.
"""

from htcc_installer.actions.upgrade import UPGRADE_PROPERTIES

# Session.Message type for an informational log line
INSTALLMESSAGE_INFO = 0x04000000

SCRIPT = """\
function htccLog(text) {
    var rec = Session.Installer.CreateRecord(0);
    rec.StringData(0) = text;
    Session.Message(%(info)d, rec);
}
try {
    var upgradeCode = Session.Property("UpgradeCode");
    var current = Session.Property("ProductCode").toUpperCase();
    var products = Session.Installer.RelatedProducts(upgradeCode);
    for (var i = 0; i < products.Count; i++) {
        var code = products.Item(i);
        if (code.toUpperCase() == current) {
            continue;
        }
%(assignments)s
        htccLog("Found related product " + code);
        break;
    }
} catch (e) {
    htccLog("Unable to enumerate products related to " + Session.Property("UpgradeCode") + ": " + e.message);
}
"""


def related_products_script(properties=UPGRADE_PROPERTIES) -> str:
    assignments = "\n".join(f'        Session.Property("{name}") = code;' for name in properties)
    return SCRIPT % {"info": INSTALLMESSAGE_INFO, "assignments": assignments}
